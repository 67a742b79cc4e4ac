import logging

from django.core.exceptions import ImproperlyConfigured
from django.template.loader import render_to_string

from sitetrack.base.utils import request_cached
from sitetrack.hotjar.conf import get_snippet_url, get_tracking_settings
from sitetrack.hotjar.visibility import RequestContext, should_track

logger = logging.getLogger(__name__)


@request_cached
def hotjar_processor(request):
    try:
        tracking = get_tracking_settings()
    except ImproperlyConfigured:
        # Pages keep rendering, only without the snippet.
        logger.error("Hotjar snippet not added to %s", request.path, exc_info=True)
        return {}
    if tracking is None:
        return {}

    if not should_track(tracking, RequestContext.from_request(request)):
        logger.debug("Hotjar snippet not added to %s", request.path)
        return {}

    return {
        'extra_head_hotjar': render_to_string(
            'hotjar/hotjar-head.html', {'snippet_url': get_snippet_url()}
        )
    }
