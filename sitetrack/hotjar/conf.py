import logging

from django.apps import apps
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.urls import reverse

from sitetrack.hotjar.forms import HotjarSettingsForm
from sitetrack.hotjar.snippet import build_snippet
from sitetrack.hotjar.visibility import (
    PageVisibility,
    RoleVisibility,
    TrackingSettings,
    is_valid_page_pattern,
    parse_pages,
)

logger = logging.getLogger(__name__)

SNIPPET_FILENAME = 'hotjar.script.js'


def _enum_value(value, enum):
    # Settings may name the mode instead of giving its number.
    if isinstance(value, enum):
        return value.value
    if isinstance(value, str) and value.upper() in enum.__members__:
        return enum[value.upper()].value
    return value


def _roles_list(roles):
    if isinstance(roles, str):
        return [roles]
    return list(roles or ())


def get_tracking_settings():
    """Returns the validated :class:`TrackingSettings` of the site, or
       ``None`` if no Hotjar account is configured.

       Raises :exc:`ImproperlyConfigured` if the account, the snippet
       version, the visibility modes or the roles are invalid. Malformed
       page patterns are kept and never match, so they are only logged.
    """
    account = getattr(settings, 'HOTJAR_ACCOUNT', None)
    if not account:
        return None

    form = HotjarSettingsForm(
        data={
            'account': account,
            'snippet_version': getattr(settings, 'HOTJAR_SNIPPET_VERSION', ''),
            'visibility_pages': _enum_value(
                getattr(settings, 'HOTJAR_VISIBILITY_PAGES', 0), PageVisibility
            ),
            'visibility_roles': _enum_value(
                getattr(settings, 'HOTJAR_VISIBILITY_ROLES', 0), RoleVisibility
            ),
            'roles': _roles_list(getattr(settings, 'HOTJAR_ROLES', ())),
        }
    )
    if not form.is_valid():
        errors = '; '.join(
            '%s: %s' % (field, ' '.join(str(e) for e in field_errors))
            for field, field_errors in form.errors.items()
        )
        raise ImproperlyConfigured("Invalid Hotjar settings (%s)" % errors)

    pages = parse_pages(getattr(settings, 'HOTJAR_PAGES', ''))
    for page in pages:
        if not is_valid_page_pattern(page):
            logger.warning("Hotjar page pattern %r is not prefixed with slash", page)

    data = form.cleaned_data
    return TrackingSettings(
        account_id=data['account'],
        snippet_version=data['snippet_version'],
        page_visibility=data['visibility_pages'],
        pages=pages,
        role_visibility=data['visibility_roles'],
        roles=data['roles'],
        front_path=getattr(settings, 'HOTJAR_FRONT_PATH', '/'),
    )


def should_compact_snippet():
    """The snippet is compacted when scripts get minified site-wide anyway,
       i.e. when django-compressor is enabled or an asset aggregation app
       from ``HOTJAR_AGGREGATION_APPS`` is installed.
    """
    if getattr(settings, 'COMPRESS_ENABLED', False):
        return True
    return any(
        apps.is_installed(app)
        for app in getattr(settings, 'HOTJAR_AGGREGATION_APPS', ())
    )


def get_snippet(tracking):
    return build_snippet(
        tracking.account_id, tracking.snippet_version, should_compact_snippet()
    )


def get_snippet_url():
    return getattr(settings, 'HOTJAR_SNIPPET_URL', None) or reverse('hotjar_snippet')
