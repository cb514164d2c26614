"""
Django settings for the tenant dashboard project.

All deployment specific values come from environment variables so the same
module serves local development, tests and production.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    return os.getenv(name, str(default)).strip().lower() in ('1', 'true', 'yes', 'on')


SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-dashboard-dev-key')

DEBUG = env_bool('DJANGO_DEBUG', False)

ALLOWED_HOSTS = [h.strip() for h in os.getenv('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',') if h.strip()]


INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'django.contrib.sessions',
    'rest_framework',
    'dashboard.core',
    'dashboard.locations',
    'dashboard.catalog',
    'dashboard.inventory',
    'dashboard.menu',
    'dashboard.staff',
    'dashboard.parties',
    'dashboard.payments',
    'dashboard.backups',
    'dashboard.reports',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'dashboard.config.urls'

WSGI_APPLICATION = 'dashboard.config.wsgi.application'

# Only the session table lives locally, all business data belongs to the tenant API
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.getenv('DJANGO_DB_PATH', str(BASE_DIR.parent / 'db.sqlite3')),
    }
}

REDIS_URL = os.getenv('REDIS_URL', '')

if REDIS_URL:
    CACHES = {
        'default': {
            'BACKEND': 'django_redis.cache.RedisCache',
            'LOCATION': REDIS_URL,
            'OPTIONS': {
                'CLIENT_CLASS': 'django_redis.client.DefaultClient',
            },
            'KEY_PREFIX': 'dashboard',
        }
    }
else:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'dashboard-default',
        }
    }

SESSION_ENGINE = 'django.contrib.sessions.backends.cache'
SESSION_COOKIE_AGE = 60 * 60 * 8

LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.getenv('DJANGO_TIME_ZONE', 'Asia/Karachi')
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': [
        'dashboard.core.permissions.HasTenantSession',
    ],
    'UNAUTHENTICATED_USER': None,
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'EXCEPTION_HANDLER': 'dashboard.core.exceptions.custom_exception_handler',
}

# Remote tenant API
TENANT_API_BASE_URL = (
    os.getenv('TENANT_API_BASE_URL')
    or os.getenv('API_BASE_URL')
    or os.getenv('API_BASE')
    or 'https://api.tritechtechnologyllc.com'
)
DEFAULT_TENANT_SLUG = os.getenv('TENANT_SLUG', 'extraction-testt')
DEFAULT_TENANT_ID = os.getenv('TENANT_ID', '')
TENANT_API_TIMEOUT = float(os.getenv('TENANT_API_TIMEOUT', '30'))
TENANT_API_LIST_LIMIT = int(os.getenv('TENANT_API_LIST_LIMIT', '1000'))

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'dashboard': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
        },
    },
}
