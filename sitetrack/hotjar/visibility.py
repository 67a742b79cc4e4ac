import re
from collections import namedtuple
from enum import Enum

FRONT_PAGE_TOKEN = '<front>'
WILDCARD = '*'

ANONYMOUS_ROLE = 'anonymous'
AUTHENTICATED_ROLE = 'authenticated'
SUPERUSER_ROLE = 'superuser'

_line_break_re = re.compile(r'\r\n?|\n')


class PageVisibility(Enum):
    EXCLUDE_LISTED = 0
    INCLUDE_LISTED_ONLY = 1


class RoleVisibility(Enum):
    INCLUDE_LISTED_ONLY = 0
    EXCLUDE_LISTED = 1


class TrackingSettings(
    namedtuple(
        'TrackingSettings',
        [
            'account_id',
            'snippet_version',
            'page_visibility',
            'pages',
            'role_visibility',
            'roles',
            'front_path',
        ],
        defaults=['/'],
    )
):
    """Hotjar account and the rules deciding where its snippet is added.

       ``pages`` is a sequence of path patterns: ``<front>`` or a path
       starting with a slash, optionally ending with ``*``. ``roles`` is
       a set of role identifiers, see :meth:`RequestContext.from_request`.
    """

    __slots__ = ()


class RequestContext(namedtuple('RequestContext', ['path', 'user_roles'])):
    __slots__ = ()

    @classmethod
    def from_request(cls, request):
        return cls(request.path_info, user_roles(getattr(request, 'user', None)))


def user_roles(user):
    """Returns the role identifiers of a Django user.

       Anonymous users have the single role ``anonymous``. Authenticated
       users have ``authenticated``, the names of their groups and,
       for superusers, ``superuser``.
    """
    if user is None or not user.is_authenticated:
        return frozenset([ANONYMOUS_ROLE])
    roles = set(user.groups.values_list('name', flat=True))
    roles.add(AUTHENTICATED_ROLE)
    if user.is_superuser:
        roles.add(SUPERUSER_ROLE)
    return frozenset(roles)


def parse_pages(value):
    """Turns page patterns into a tuple, one pattern per line or item.

       ``value`` may be a string with one path per line, as typed into
       a textarea, or any iterable of strings. Blank and non-string entries
       are dropped.
    """
    if not value:
        return ()
    if isinstance(value, str):
        value = _line_break_re.split(value)
    return tuple(
        page.strip() for page in value if isinstance(page, str) and page.strip()
    )


def is_valid_page_pattern(pattern):
    return pattern == FRONT_PAGE_TOKEN or pattern.startswith('/')


def path_matches(path, pattern, front_path='/'):
    if not isinstance(pattern, str):
        return False
    pattern = pattern.strip()
    if not pattern or not is_valid_page_pattern(pattern):
        return False
    if pattern == FRONT_PAGE_TOKEN:
        return path == front_path
    # Only a trailing asterisk is a wildcard.
    if pattern.endswith(WILDCARD):
        return path.startswith(pattern[:-1])
    return path == pattern


def page_visible(settings, path):
    matched = any(
        path_matches(path, pattern, settings.front_path)
        for pattern in settings.pages or ()
    )
    if settings.page_visibility == PageVisibility.INCLUDE_LISTED_ONLY:
        return matched
    return not matched


def role_visible(settings, roles):
    if not settings.roles:
        return True
    has_listed_role = bool(set(roles) & set(settings.roles))
    if settings.role_visibility == RoleVisibility.EXCLUDE_LISTED:
        return not has_listed_role
    return has_listed_role


def should_track(settings, context):
    """Decides whether the snippet should be added to the requested page."""
    return page_visible(settings, context.path) and role_visible(
        settings, context.user_roles
    )
