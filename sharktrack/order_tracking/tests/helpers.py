"""
Shared builders for Order Tracking tests.
"""

from datetime import datetime, timezone as dt_timezone

from ..management.commands.seed_statuses import seed_statuses
from ..models import Order, ProductStatus, make_status_entry
from ..services.order_mapper import OrderMapper
from ..services.status_registry import StatusRegistry, install_registry, clear_registry

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=dt_timezone.utc)


def shopify_line_item(item_id=7001, name='Bicicleta Ruta', quantity=1, grams=12000,
                      variant_title='Rojo / M', **extra):
    item = {
        'id': item_id,
        'name': name,
        'title': name,
        'quantity': quantity,
        'grams': grams,
        'variant_title': variant_title,
    }
    item.update(extra)
    return item


def shopify_order(order_id=5001, name='#1001', line_items=None, **extra):
    """Raw order payload shaped like the commerce platform's orders endpoint."""
    payload = {
        'id': order_id,
        'name': name,
        'created_at': '2024-03-01T10:30:00-06:00',
        'financial_status': 'paid',
        'location_id': 1001,
        'total_weight': 12000,
        'fulfillments': [],
        'line_items': line_items if line_items is not None else [shopify_line_item()],
    }
    payload.update(extra)
    return payload


class RegistryMixin:
    """Seeds the status table and installs a registry for the test."""

    def setUp(self):
        super().setUp()
        seed_statuses()
        self.registry = install_registry(StatusRegistry.load())

    def tearDown(self):
        clear_registry()
        super().tearDown()

    def _create_order(self, payload=None, now=NOW):
        """Map a raw payload and store it as a new order."""
        document = OrderMapper(self.registry).map(payload or shopify_order(), now)
        return Order.objects.create(**document)

    def _receive_products(self, order, *product_ids):
        """Walk the given products (all by default) to RECEIVED_BY_OPERATOR."""
        for product in order.products:
            if product_ids and product['product_id'] not in product_ids:
                continue
            product['status'] = list(product['status']) + [
                make_status_entry(ProductStatus.RECEIVED_BY_OPERATOR.value, 'Recibido', NOW)
            ]
        order.save()
        return order
