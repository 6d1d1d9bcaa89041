"""
Periodic tasks for Order Tracking.
"""

import logging

from celery import shared_task
from django.conf import settings

from .adapters.order_source import get_order_source
from .services import OrderSyncService, trailing_window
from .services.status_registry import get_registry

logger = logging.getLogger(__name__)


@shared_task(name='sync_recent_orders')
def sync_recent_orders(days: int = None):
    """Synchronize orders created over the trailing sync window."""
    days = days or settings.ORDER_SYNC_WINDOW_DAYS
    created_at_min, created_at_max = trailing_window(days)
    logger.info(f"Scheduled order sync over the last {days} days")
    summary = OrderSyncService.sync_window(
        created_at_min, created_at_max, get_order_source(), get_registry()
    )
    return summary.as_dict()
