"""
Django settings for the Bantuin web front end.

The service keeps no local persistence: every request is forwarded to the
Bantuin backend named by BANTUIN_API_URL.
"""

import os
from pathlib import Path


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_list(name, default=''):
    return [item.strip() for item in os.environ.get(name, default).split(',') if item.strip()]


BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get(
    'DJANGO_SECRET_KEY',
    'django-insecure-bantuin-development-key-change-me'
)

DEBUG = _env_bool('DJANGO_DEBUG', default=False)

ALLOWED_HOSTS = _env_list('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver')


# Application definition

INSTALLED_APPS = [
    'corsheaders',
    'rest_framework',
    'marketplace',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'bantuin.urls'

WSGI_APPLICATION = 'bantuin.wsgi.application'

# No database: the backend is the single source of truth.
DATABASES = {}


# Internationalization

LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'Asia/Jakarta'

USE_I18N = True

USE_TZ = True


# CORS

CORS_ALLOWED_ORIGINS = _env_list('CORS_ALLOWED_ORIGINS', 'http://localhost:3000')

CORS_ALLOW_HEADERS = [
    'accept',
    'authorization',
    'content-type',
    'origin',
    'x-requested-with',
]


# Django REST framework

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'marketplace.authentication.BearerTokenAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
    ],
    'UNAUTHENTICATED_USER': None,
    'UNAUTHENTICATED_TOKEN': None,
    'EXCEPTION_HANDLER': 'marketplace.exceptions.envelope_exception_handler',
}


# Bantuin upstream and client configuration

BANTUIN_API_URL = os.environ.get('BANTUIN_API_URL', '').strip().rstrip('/')

BANTUIN_PROXY_TIMEOUT = float(os.environ.get('BANTUIN_PROXY_TIMEOUT', '15'))

BANTUIN_CLIENT_BASE_URL = os.environ.get(
    'BANTUIN_CLIENT_BASE_URL',
    'http://localhost:8000/api'
).strip().rstrip('/')

BANTUIN_NOTIFICATION_POLL_INTERVAL = float(
    os.environ.get('BANTUIN_NOTIFICATION_POLL_INTERVAL', '30')
)

BANTUIN_SERVICES_PAGE_SIZE = int(os.environ.get('BANTUIN_SERVICES_PAGE_SIZE', '12'))


# Logging

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
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'marketplace': {
            'level': os.environ.get('BANTUIN_LOG_LEVEL', 'INFO'),
        },
    },
}
