import sys
from importlib import import_module

from django.conf import settings

handler404 = 'sitetrack.base.views.handler404'

urlpatterns = []


def try_to_import_module(name):
    try:
        return import_module(name)
    except ModuleNotFoundError:
        pass
    except ImportError as e:
        if settings.DEBUG:
            print(e, file=sys.stderr)
    return None


for app in settings.INSTALLED_APPS:
    if app.startswith('sitetrack.'):
        urls_module = try_to_import_module(app + '.urls')
        if hasattr(urls_module, 'urlpatterns'):
            urlpatterns += getattr(urls_module, 'urlpatterns')
