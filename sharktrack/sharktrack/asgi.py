"""
ASGI config for the sharktrack project.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'sharktrack.settings')

application = get_asgi_application()

from order_tracking.services.status_registry import load_registry  # noqa: E402

load_registry()
