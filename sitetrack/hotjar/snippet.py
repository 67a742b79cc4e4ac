import json

SCRIPT_URL_PREFIX = '//static.hotjar.com/c/hotjar-'
SCRIPT_URL_SUFFIX = '.js?sv='

# The Tracking Code should be placed in the <head> tag of every page
# to be tracked, as the Hotjar dashboard puts it.
SNIPPET_TEMPLATE = '''(function(h,o,t,j,a,r){
  h.hj=h.hj||function(){(h.hj.q=h.hj.q||[]).push(arguments)};
  h._hjSettings={hjid:%(hjid)s,hjsv:%(hjsv)s};
  a=o.getElementsByTagName('head')[0];
  r=o.createElement('script');r.async=1;
  r.src=t+h._hjSettings.hjid+j+h._hjSettings.hjsv;
  a.appendChild(r);
})(window,document,'%(url_prefix)s','%(url_suffix)s');'''

_js_string_escapes = {
    ord('<'): '\\u003C',
    ord('>'): '\\u003E',
    ord('&'): '\\u0026',
    ord("'"): '\\u0027',
}


def escape_js_string(value):
    """Encodes ``value`` as a double-quoted JavaScript string literal.

       The result is plain JSON with the HTML-sensitive characters
       ``<``, ``>``, ``&``, ``'`` and ``"`` written as ``\\uXXXX`` escapes,
       so it may be embedded in a ``<script>`` element or an HTML attribute
       without closing either of them.
    """
    encoded = json.dumps(str(value))[1:-1]
    # A backslash in the JSON output always starts an escape sequence,
    # so this only hits escaped quotes.
    encoded = encoded.replace('\\"', '\\u0022')
    return '"%s"' % encoded.translate(_js_string_escapes)


def compact_snippet(script):
    return script.replace('\n', '').replace('  ', '')


def build_snippet(account_id, snippet_version, compact=False):
    """Returns the Hotjar tracking snippet for the given account.

       :param account_id: Hotjar ID
       :param snippet_version: Hotjar snippet version
       :param compact: whether to strip newlines and indentation, which is
                       what asset aggregation would do to the script anyway
    """
    script = SNIPPET_TEMPLATE % {
        'hjid': escape_js_string(account_id),
        'hjsv': escape_js_string(snippet_version),
        'url_prefix': SCRIPT_URL_PREFIX,
        'url_suffix': SCRIPT_URL_SUFFIX,
    }
    if compact:
        script = compact_snippet(script)
    return script


def snippet_script_url(account_id, snippet_version):
    """Returns the URL of the script which the snippet loads in the browser."""
    return '%s%s%s%s' % (
        SCRIPT_URL_PREFIX,
        account_id,
        SCRIPT_URL_SUFFIX,
        snippet_version,
    )
