"""
Order Sync Service for Order Tracking.

Pulls orders from the commerce platform, maps them, reconciles them against
stored orders and persists the result, one order at a time.
"""

import logging
from calendar import monthrange
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Dict, Any, List, Optional, Tuple

from django.db import DatabaseError, transaction
from django.utils import timezone

from ..adapters.order_source import OrderSourceInterface
from ..exceptions import BusinessException, ConflictIgnoredException, UpstreamException
from ..models import Order, Product
from .order_mapper import OrderMapper
from .reconciliation import ReconciliationEngine, order_document
from .status_registry import StatusRegistry

logger = logging.getLogger(__name__)


@dataclass
class SyncSummary:
    """Counters for one sync run."""
    fetched: int = 0
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    failed: int = 0
    pages: int = 0
    stopped_at_page: Optional[int] = None
    stop_reason: Optional[str] = None

    @property
    def processed(self) -> int:
        return self.created + self.updated + self.unchanged

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['processed'] = self.processed
        return data


def trailing_window(days: int, now: datetime = None) -> Tuple[datetime, datetime]:
    """The last `days` days up to now."""
    now = now or timezone.now()
    return now - timedelta(days=days), now


def calendar_month_window(now: datetime = None) -> Tuple[datetime, datetime]:
    """From the first day of the previous month to the end of the current month."""
    now = timezone.localtime(now or timezone.now())
    if now.month == 1:
        start = now.replace(year=now.year - 1, month=12, day=1)
    else:
        start = now.replace(month=now.month - 1, day=1)
    start = start.replace(hour=0, minute=0, second=0, microsecond=0)
    last_day = monthrange(now.year, now.month)[1]
    end = now.replace(day=last_day, hour=23, minute=59, second=59, microsecond=999999)
    return start, end


def update_product_mirrors(order_id: str, products: List[Dict[str, Any]]) -> int:
    """
    Make sure every product of an order has a mirror row referencing it.

    Returns:
        Number of mirror rows created
    """
    created_count = 0
    for product in products:
        mirror, created = Product.objects.select_for_update().get_or_create(
            product_id=product['product_id'],
            defaults={
                'name': product.get('name') or '',
                'weight': product.get('weight') or 0,
                'orders': [order_id],
            },
        )
        if created:
            created_count += 1
            continue

        changed = mirror.add_order(order_id)
        if mirror.name != product.get('name') and product.get('name'):
            mirror.name = product['name']
            changed = True
        if mirror.weight != (product.get('weight') or 0):
            mirror.weight = product.get('weight') or 0
            changed = True
        if changed:
            mirror.save()
    return created_count


class OrderSyncService:
    """Service class for commerce platform synchronization."""

    @staticmethod
    def upsert_order(incoming: Dict[str, Any], now: datetime = None,
                     engine: ReconciliationEngine = None) -> Tuple[Order, bool]:
        """
        Create or replace one mapped order.

        Args:
            incoming: Order document produced by OrderMapper
            now: Write timestamp
            engine: Reconciliation engine, defaults to the current comparison spec

        Returns:
            Tuple of (Order, created)

        Raises:
            ConflictIgnoredException: If the stored order is already equivalent;
                nothing is written
        """
        now = now or timezone.now()
        engine = engine or ReconciliationEngine()
        order_id = incoming['shopify_order_id']

        with transaction.atomic():
            order = Order.objects.select_for_update().filter(shopify_order_id=order_id).first()

            if order is None:
                order = Order.objects.create(**incoming)
                update_product_mirrors(order_id, incoming['order_details']['products'])
                logger.info(f"Order {order_id} created with {len(order.products)} products")
                return order, True

            diff = engine.compare(incoming, order_document(order))
            if diff.is_equivalent:
                raise ConflictIgnoredException(order_id, diff.comparison_version)

            engine.merge(incoming, order, now)
            order.save()
            update_product_mirrors(order_id, order.products)
            logger.info(f"Order {order_id} replaced ({diff.describe()})")
            return order, False

    @staticmethod
    def sync_orders(shopify_orders: List[Dict[str, Any]], mapper: OrderMapper,
                    summary: SyncSummary, now: datetime = None) -> SyncSummary:
        """
        Map and upsert a batch of raw orders.

        Each order is isolated: a failing order is logged and counted, and the
        rest of the batch continues.
        """
        now = now or timezone.now()
        engine = ReconciliationEngine()
        for shopify_order in shopify_orders:
            order_id = shopify_order.get('id')
            try:
                incoming = mapper.map(shopify_order, now)
                _, created = OrderSyncService.upsert_order(incoming, now, engine)
            except ConflictIgnoredException:
                summary.unchanged += 1
                logger.debug(f"Order {order_id} unchanged")
            except BusinessException as e:
                summary.failed += 1
                logger.error(f"Order {order_id} failed to sync: [{e.code}] {e.message}")
            except DatabaseError as e:
                summary.failed += 1
                logger.error(f"Order {order_id} failed to persist: {e}")
            else:
                if created:
                    summary.created += 1
                else:
                    summary.updated += 1
        return summary

    @staticmethod
    def sync_window(created_at_min: datetime, created_at_max: datetime,
                    source: OrderSourceInterface, registry: StatusRegistry,
                    now: datetime = None) -> SyncSummary:
        """
        Synchronize every order created inside a window.

        Args:
            created_at_min: Window start
            created_at_max: Window end
            source: Order source to page through
            registry: Loaded status registry
            now: Write timestamp for the whole run

        Returns:
            SyncSummary for the run

        Raises:
            UpstreamException: If the first page cannot be fetched
        """
        now = now or timezone.now()
        mapper = OrderMapper(registry)
        summary = SyncSummary()
        logger.info(f"Order sync started for {created_at_min.isoformat()} .. {created_at_max.isoformat()}")

        pages = source.iter_pages(created_at_min, created_at_max)
        while True:
            try:
                page = next(pages)
            except StopIteration:
                break
            except UpstreamException as e:
                if summary.pages == 0:
                    logger.error(f"Order sync aborted on first page: {e.category} {e.message}")
                    raise
                summary.stopped_at_page = summary.pages + 1
                summary.stop_reason = e.category
                logger.error(
                    f"Order sync stopped at page {summary.stopped_at_page} "
                    f"({e.category}): {e.message}"
                )
                break

            summary.pages += 1
            summary.fetched += len(page)
            OrderSyncService.sync_orders(page, mapper, summary, now)

        logger.info(
            f"Order sync finished: {summary.processed} processed "
            f"({summary.created} created, {summary.updated} updated, {summary.unchanged} unchanged), "
            f"{summary.failed} failed over {summary.pages} pages"
        )
        return summary
