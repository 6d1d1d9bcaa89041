"""
WSGI config for the sharktrack project.

The status registry is loaded before the first request is served; if it
cannot be loaded the process does not start.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'sharktrack.settings')

application = get_wsgi_application()

from order_tracking.services.status_registry import load_registry  # noqa: E402

load_registry()
