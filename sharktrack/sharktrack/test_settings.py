"""
Settings used by the test suite.
"""

import os

os.environ.setdefault('DJANGO_DEBUG', 'true')
os.environ.setdefault('DJANGO_SECRET_KEY', 'sharktrack-test-key')
os.environ.setdefault('SHOPIFY_STORE_URL', 'sharktest.myshopify.com')
os.environ.setdefault('SHOPIFY_ACCESS_TOKEN', 'shpat_test')
os.environ.setdefault('SHOPIFY_STORE_HANDLE', 'sharktest')
os.environ.setdefault('SHIP24_API_KEY', 'ship24-test-key')

from .settings import *  # noqa: E402,F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

KNOWN_LOCATIONS = {
    '1001': 'SAN_JOSE',
    '1002': 'HEREDIA',
}

CONSOLIDATION_GATE = 'ever_reached'

CELERY_TASK_ALWAYS_EAGER = True
CELERY_BROKER_URL = 'memory://'

LOGGING['loggers']['order_tracking']['level'] = 'CRITICAL'  # noqa: F405
