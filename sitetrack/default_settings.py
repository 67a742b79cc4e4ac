import os

import sitetrack

# Enable debugging features.
#
# SET DEBUG = False FOR PRODUCTION DEPLOYMENT.
DEBUG = False

# Site name displayed in the title.
SITE_NAME = 'sitetrack'

DATABASES = {
    'default': {
        'ENGINE': os.getenv('SITETRACK_DB_ENGINE', 'django.db.backends.sqlite3'),
        'NAME': os.getenv('SITETRACK_DB_NAME', 'sitetrack'),        # Or path to database file if using sqlite3.
        'USER': os.getenv('SITETRACK_DB_USER', 'sitetrack'),        # Not used with sqlite3.
        'PASSWORD': os.getenv('SITETRACK_DB_PASSWORD', 'password'), # Not used with sqlite3.
        'HOST': os.getenv('SITETRACK_DB_HOST', ''),                 # Set to empty string for localhost. Not used with sqlite3.
        'PORT': os.getenv('SITETRACK_DB_PORT', ''),                 # Set to empty string for default. Not used with sqlite3.
        'ATOMIC_REQUESTS': True,         # Don't touch unless you know what you're doing.
    }
}

# Python dotted path to the WSGI application used by Django's runserver.
WSGI_APPLICATION = 'sitetrack.wsgi.application'

LANGUAGES = (
    ('en', 'English'),
)

TIME_ZONE = os.getenv('SITETRACK_TIMEZONE', 'UTC')
LANGUAGE_CODE = 'en'
USE_I18N = True
USE_TZ = True

# URL prefix for static files.
STATIC_URL = '/static/'
STATIC_ROOT = os.getenv('SITETRACK_STATIC_ROOT', '')

# Absolute filesystem path to the directory that will hold user-uploaded
# and generated files.
MEDIA_ROOT = os.getenv(
    'SITETRACK_MEDIA_ROOT',
    os.path.join(os.path.dirname(sitetrack.__file__), '..', 'media'),
)
MEDIA_URL = '/media/'

# List of finder classes that know how to find static files in
# various locations.
STATICFILES_FINDERS = (
    'django.contrib.staticfiles.finders.FileSystemFinder',
    'django.contrib.staticfiles.finders.AppDirectoriesFinder',
    'compressor.finders.CompressorFinder',
)

# Make this unique, and don't share it with anybody.
# Secret key can't be empty, it is overridden later.
SECRET_KEY = os.getenv('SITETRACK_SECRET', '9b0a8a3c-51e2-4c1f-93a4-4e2d3bde0f6e')

# Email addresses to send error message reports.
ADMINS = (
    ('Your Name', 'youremail@example.com'),
)
MANAGERS = ADMINS

SERVER_EMAIL = 'webmaster@localhost'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.contrib.auth.context_processors.auth',
                'django.template.context_processors.debug',
                'django.template.context_processors.i18n',
                'django.template.context_processors.static',
                'django.template.context_processors.request',
                'django.contrib.messages.context_processors.messages',
                'sitetrack.base.processors.site_name',
                'sitetrack.hotjar.processors.hotjar_processor',
            ],
        },
    },
]

MIDDLEWARE = (
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.locale.LocaleMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    # Uncomment the next line for simple clickjacking protection:
    # 'django.middleware.clickjacking.XFrameOptionsMiddleware',
)

ROOT_URLCONF = 'sitetrack.urls'

COMPRESS_ENABLED = True
COMPRESS_PARSER = 'compressor.parser.BeautifulSoupParser'

INSTALLED_APPS = (
    'sitetrack.hotjar',
    'sitetrack.base',

    'compressor',

    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
)

AUTHENTICATION_BACKENDS = (
    'django.contrib.auth.backends.ModelBackend',
)

DEFAULT_AUTO_FIELD = 'django.db.models.AutoField'

# Hotjar
#
# Tracking is enabled once HOTJAR_ACCOUNT is set. The ID and the snippet
# version can be found in the tracking code shown by the Hotjar dashboard:
# h._hjSettings={hjid:12345,hjsv:6}
HOTJAR_ACCOUNT = None
HOTJAR_SNIPPET_VERSION = '6'

# Page visibility: 0 - every page except the listed pages,
# 1 - the listed pages only. Names of sitetrack.hotjar.visibility.PageVisibility
# members are accepted as well.
#
# Pages are given by their paths, one per line (or as a list). The '*'
# character at the end of a path is a wildcard, e.g. '/blog/*' matches every
# blog post. '<front>' is the front page (HOTJAR_FRONT_PATH).
HOTJAR_VISIBILITY_PAGES = 0
HOTJAR_PAGES = '/admin\n/admin/*'
HOTJAR_FRONT_PATH = '/'

# Role visibility: 0 - add to the listed roles only, 1 - add to every role
# except the listed ones. If no role is listed, all users are tracked.
# Roles are names of auth groups and the pseudo-roles 'anonymous',
# 'authenticated' and 'superuser'.
HOTJAR_VISIBILITY_ROLES = 0
HOTJAR_ROLES = ()

# The snippet is compacted when COMPRESS_ENABLED is set or when any of these
# asset aggregation apps is installed.
HOTJAR_AGGREGATION_APPS = ('pipeline',)

# Set to the URL of a snippet file written by ./manage.py write_hotjar_snippet
# to serve it without hitting Django. When None, pages reference the
# snippet view.
HOTJAR_SNIPPET_URL = None
HOTJAR_SNIPPET_ROOT = os.path.join(MEDIA_ROOT, 'hotjar')
HOTJAR_SNIPPET_MAX_AGE = 3600

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'filters': {
        'require_debug_false': {
            '()': 'django.utils.log.RequireDebugFalse'
        }
    },
    'formatters': {
        'date_and_level': {
            'format': '[%(asctime)s %(levelname)s %(process)d:%(thread)d]'
                      ' %(message)s',
        },
    },
    'handlers': {
        'console': {
            'level': 'INFO',
            'class': 'logging.StreamHandler',
            'formatter': 'date_and_level',
        },
        'mail_admins': {
            'level': 'ERROR',
            'filters': ['require_debug_false'],
            'class': 'django.utils.log.AdminEmailHandler'
        },
    },
    'loggers': {
        'django.request': {
            'handlers': ['mail_admins'],
            'level': 'ERROR',
            'propagate': True,
        },
        'sitetrack': {
            'handlers': ['console'],
            'level': 'DEBUG',
            'propagate': True,
        },
    }
}
