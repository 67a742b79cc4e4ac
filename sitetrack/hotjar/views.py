import hashlib

from django.conf import settings
from django.http import Http404, HttpResponse
from django.utils.cache import patch_cache_control
from django.views.decorators.http import etag, require_safe

from sitetrack.base.utils import request_cached
from sitetrack.hotjar.conf import get_snippet, get_tracking_settings


@request_cached
def _request_snippet(request):
    tracking = get_tracking_settings()
    if tracking is None:
        return None
    return get_snippet(tracking)


def _snippet_etag(request):
    snippet = _request_snippet(request)
    if snippet is None:
        return None
    return hashlib.md5(snippet.encode('utf-8')).hexdigest()


@require_safe
@etag(_snippet_etag)
def snippet_view(request):
    snippet = _request_snippet(request)
    if snippet is None:
        raise Http404("Hotjar tracking is not configured")
    response = HttpResponse(
        snippet, content_type='application/javascript; charset=utf-8'
    )
    patch_cache_control(
        response,
        public=True,
        max_age=getattr(settings, 'HOTJAR_SNIPPET_MAX_AGE', 3600),
    )
    return response
