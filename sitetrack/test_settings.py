# pylint: disable=wildcard-import
from sitetrack.default_settings import *

TIME_ZONE = 'UTC'

ADMINS = (('Test admin', 'admin@example.com'),)

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'ATOMIC_REQUESTS': True,
    }
}

SECRET_KEY = 'no_secret'
COMPRESS_ENABLED = False

PASSWORD_HASHERS = ('django.contrib.auth.hashers.MD5PasswordHasher',)

CACHES = {'default': {'BACKEND': 'django.core.cache.backends.locmem.LocMemCache'}}

STATIC_ROOT = ''

HOTJAR_ACCOUNT = None
HOTJAR_SNIPPET_URL = None
