"""
Django settings for the sharktrack project.

Every deployment specific value comes from the environment.
"""

import json
import os
from datetime import timedelta
from pathlib import Path

from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    return os.environ.get(name, str(default)).strip().lower() in ('1', 'true', 'yes', 'on')


def env_list(name, default=''):
    return [item.strip() for item in os.environ.get(name, default).split(',') if item.strip()]


def env_json(name, default):
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return json.loads(raw)
    except ValueError as e:
        raise ImproperlyConfigured(f'{name} must be valid JSON: {e}')


DEBUG = env_bool('DJANGO_DEBUG', False)

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY')
if not SECRET_KEY:
    if not DEBUG:
        raise ImproperlyConfigured('DJANGO_SECRET_KEY is required when DJANGO_DEBUG is off.')
    SECRET_KEY = 'sharktrack-insecure-development-key'

ALLOWED_HOSTS = env_list('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1')

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    'corsheaders',
    'rest_framework',
    'django_filters',

    'order_tracking',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'sharktrack.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'sharktrack.wsgi.application'

DATABASE_ENGINE = os.environ.get('DATABASE_ENGINE', 'django.db.backends.sqlite3')
if DATABASE_ENGINE == 'django.db.backends.sqlite3':
    DATABASES = {
        'default': {
            'ENGINE': DATABASE_ENGINE,
            'NAME': os.environ.get('DATABASE_NAME', str(BASE_DIR / 'db.sqlite3')),
        }
    }
else:
    DATABASE_NAME = os.environ.get('DATABASE_NAME')
    DATABASE_USER = os.environ.get('DATABASE_USER')
    DATABASE_PASSWORD = os.environ.get('DATABASE_PASSWORD')
    DATABASE_HOST = os.environ.get('DATABASE_HOST')
    DATABASE_PORT = os.environ.get('DATABASE_PORT', 5432)

    if any(not conf for conf in [DATABASE_NAME, DATABASE_USER, DATABASE_HOST]):
        raise ImproperlyConfigured('DATABASE_NAME, DATABASE_USER and DATABASE_HOST are required.')

    DATABASES = {
        'default': {
            'ENGINE': DATABASE_ENGINE,
            'NAME': DATABASE_NAME,
            'USER': DATABASE_USER,
            'PASSWORD': DATABASE_PASSWORD,
            'HOST': DATABASE_HOST,
            'PORT': DATABASE_PORT,
        }
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'es'
TIME_ZONE = 'America/Costa_Rica'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

# Django REST framework
REST_FRAMEWORK = {
    'DEFAULT_FILTER_BACKENDS': ['django_filters.rest_framework.DjangoFilterBackend'],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'DEFAULT_RENDERER_CLASSES': ['rest_framework.renderers.JSONRenderer'],
    'UNAUTHENTICATED_USER': None,
}

# CORS
CORS_ALLOWED_ORIGINS = env_list('CORS_ALLOWED_ORIGINS', 'http://localhost:5173')
CORS_ALLOW_HEADERS = [
    'Authorization',
    'Content-Type',
]

# Commerce platform
SHOPIFY_STORE_URL = os.environ.get('SHOPIFY_STORE_URL', '')
SHOPIFY_ACCESS_TOKEN = os.environ.get('SHOPIFY_ACCESS_TOKEN', '')
SHOPIFY_API_VERSION = os.environ.get('SHOPIFY_API_VERSION', '2023-01')
SHOPIFY_STORE_HANDLE = os.environ.get('SHOPIFY_STORE_HANDLE', SHOPIFY_STORE_URL.split('.')[0])
SHOPIFY_REQUEST_TIMEOUT = float(os.environ.get('SHOPIFY_REQUEST_TIMEOUT', 30))

# Shipment tracking provider
SHIP24_API_KEY = os.environ.get('SHIP24_API_KEY', '')
SHIP24_API_URL = os.environ.get('SHIP24_API_URL', 'https://api.ship24.com/public/v1')
SHIP24_REQUEST_TIMEOUT = float(os.environ.get('SHIP24_REQUEST_TIMEOUT', 15))

# Order tracking
ORDER_SYNC_INTERVAL_MINUTES = int(os.environ.get('ORDER_SYNC_INTERVAL_MINUTES', 10))
ORDER_SYNC_WINDOW_DAYS = int(os.environ.get('ORDER_SYNC_WINDOW_DAYS', 30))

# 'ever_reached' or 'current'
CONSOLIDATION_GATE = os.environ.get('CONSOLIDATION_GATE', 'ever_reached')
if CONSOLIDATION_GATE not in ('ever_reached', 'current'):
    raise ImproperlyConfigured("CONSOLIDATION_GATE must be 'ever_reached' or 'current'.")

# Platform location id -> location bucket
KNOWN_LOCATIONS = env_json('KNOWN_LOCATIONS', {})

CARRIERS = env_json('CARRIERS', {
    'CorreosCR': {'name': 'Correos de Costa Rica', 'requires_tracking': True},
    'Mensajeria': {'name': 'Mensajería Sharkletas', 'requires_tracking': False},
    'Retiro': {'name': 'Retiro en tienda', 'requires_tracking': False},
})
DEFAULT_CARRIER = os.environ.get('DEFAULT_CARRIER', 'CorreosCR')
if DEFAULT_CARRIER not in CARRIERS:
    raise ImproperlyConfigured(f'DEFAULT_CARRIER {DEFAULT_CARRIER} is not in CARRIERS.')

# Celery
CELERY_BROKER_URL = os.environ.get('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.environ.get('CELERY_RESULT_BACKEND', None)
CELERY_TASK_ALWAYS_EAGER = env_bool('CELERY_TASK_ALWAYS_EAGER', False)
CELERY_TIMEZONE = TIME_ZONE
CELERY_BEAT_SCHEDULE = {
    'sync-recent-orders': {
        'task': 'sync_recent_orders',
        'schedule': timedelta(minutes=ORDER_SYNC_INTERVAL_MINUTES),
    },
}

# Logging
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
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
        'order_tracking': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
    },
}
