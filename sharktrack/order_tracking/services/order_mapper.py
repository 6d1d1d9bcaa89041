"""
Order mapper for Order Tracking.

Turns a commerce platform order payload into the internal order document.
Mapping is pure: the same payload, registry and clock value always produce
the same document.
"""

import re
from datetime import datetime, timezone as dt_timezone
from typing import Dict, Any, List, Mapping, Optional, Tuple

from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from ..exceptions import ValidationException
from ..models import (
    StatusKind, PaymentStatus, OrderType, PurchaseType, FulfillmentStatus,
    PROVIDER_TO_BE_DEFINED, LOCATION_UNDETERMINED, make_status_entry,
)
from .status_registry import StatusRegistry

VARIANT_SEPARATORS = re.compile(r'\s*[/|,]\s*')
VARIANT_JOINER = ' / '
DEFAULT_VARIANT_TITLE = 'Default Title'

ORDER_CREATED_DESCRIPTION = 'Nueva Orden Creada'
PRODUCT_CREATED_DESCRIPTION = 'Producto ingresado en el sistema'

ADMIN_ORDER_URL = 'https://admin.shopify.com/store/{store}/orders/{order_id}'


def variant_segments(variant_title: Optional[str]) -> List[str]:
    """Every non-empty segment of a variant descriptor; none for the default variant."""
    if not variant_title or variant_title.strip() == DEFAULT_VARIANT_TITLE:
        return []
    return [part for part in VARIANT_SEPARATORS.split(variant_title.strip()) if part]


def parse_variant(variant_title: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Split a combined variant descriptor into (color, size).

    "Rojo / M" -> ("Rojo", "M"); "Azul" -> ("Azul", None). Segments after the
    second are not split out; normalize_variant_title keeps them.
    """
    parts = variant_segments(variant_title)
    color = parts[0] if len(parts) > 0 else None
    size = parts[1] if len(parts) > 1 else None
    return color, size


def build_variant_title(color: Optional[str], size: Optional[str]) -> Optional[str]:
    """Rebuild the combined variant descriptor from its discrete parts."""
    parts = [part for part in (color, size) if part]
    return VARIANT_JOINER.join(parts) if parts else None


def normalize_variant_title(variant_title: Optional[str]) -> Optional[str]:
    """Variant descriptor with uniform separators: "Rojo|M,Corto" -> "Rojo / M / Corto"."""
    parts = variant_segments(variant_title)
    return VARIANT_JOINER.join(parts) if parts else None


def classify_location(location_id: Any, known_locations: Mapping[str, str]) -> str:
    """Bucket a platform location id; unknown ids become UNDETERMINED."""
    if location_id is None:
        return LOCATION_UNDETERMINED
    return known_locations.get(str(location_id), LOCATION_UNDETERMINED)


def normalize_payment_status(financial_status: Optional[str]) -> str:
    if not financial_status:
        return PaymentStatus.PENDING.value
    value = financial_status.strip().lower().replace(' ', '_')
    if value not in PaymentStatus.values:
        raise ValidationException(
            f"Unsupported payment status: {financial_status}",
            {'payment_status': [f"'{financial_status}' is not one of {PaymentStatus.values}"]}
        )
    return value


class OrderMapper:
    """Maps commerce platform orders onto the internal order document."""

    def __init__(self, registry: StatusRegistry, store_handle: str = None,
                 known_locations: Mapping[str, str] = None):
        self.registry = registry
        self.store_handle = store_handle if store_handle is not None else settings.SHOPIFY_STORE_HANDLE
        if known_locations is None:
            known_locations = settings.KNOWN_LOCATIONS
        self.known_locations = {str(k): v for k, v in known_locations.items()}

    def map(self, shopify_order: Dict[str, Any], now: datetime) -> Dict[str, Any]:
        """
        Map one platform order.

        Args:
            shopify_order: Order payload as returned by the orders endpoint
            now: Timestamp used for intake status entries and updated_at

        Returns:
            Order document keyed by Order model field names

        Raises:
            ConfigurationException: If the registry has no usable intake status
            ValidationException: If the payload is missing required data
        """
        errors: Dict[str, List[str]] = {}

        order_id = shopify_order.get('id')
        if order_id in (None, ''):
            errors['id'] = ['Order id is required']
        order_number = shopify_order.get('name') or shopify_order.get('order_number')
        if not order_number:
            errors['name'] = ['Order number is required']

        created_at = self._parse_created_at(shopify_order.get('created_at'), errors)

        line_items = shopify_order.get('line_items') or []
        for index, item in enumerate(line_items):
            if not (item.get('name') or item.get('title')):
                errors[f'line_items[{index}].name'] = ['Product name is required']
            quantity = item.get('quantity')
            if not isinstance(quantity, int) or quantity < 0:
                errors[f'line_items[{index}].quantity'] = ['Quantity must be a non-negative integer']

        if errors:
            raise ValidationException(
                f"Order {order_id} failed validation",
                errors
            )

        product_status = self.registry.initial_code(StatusKind.PRODUCT)
        order_status = self.registry.initial_code(StatusKind.ORDER)
        self.registry.validate(StatusKind.PRODUCT, product_status)
        self.registry.validate_order_status(order_status)

        order_id = str(order_id)
        initial_entry = make_status_entry(order_status, ORDER_CREATED_DESCRIPTION, now)

        return {
            'shopify_order_id': order_id,
            'shopify_order_number': str(order_number),
            'shopify_order_link': ADMIN_ORDER_URL.format(store=self.store_handle, order_id=order_id),
            'payment_status': normalize_payment_status(shopify_order.get('financial_status')),
            'order_type': OrderType.UNDETERMINED.value,
            'location': classify_location(shopify_order.get('location_id'), self.known_locations),
            'current_status': dict(initial_entry),
            'status_history': [initial_entry],
            'order_details': {
                'products': [self._map_product(item, product_status, now) for item in line_items],
                'total_weight': shopify_order.get('total_weight') or 0,
                'provider_info': [],
            },
            'tracking_info': {
                'order_tracking': self._order_tracking(shopify_order),
                'product_trackings': [],
            },
            'fulfillment_status': {'status': FulfillmentStatus.UNFULFILLED.value},
            'flags': {'dual_delay': False, 'delivery_delay': False},
            'processing_time_in_dual': 0,
            'created_at': created_at,
            'updated_at': now,
        }

    def _map_product(self, item: Dict[str, Any], status: str, now: datetime) -> Dict[str, Any]:
        if item.get('id') is not None:
            product_id = str(item['id'])
        else:
            product_id = f"temp_{item.get('variant_id') or item.get('sku') or item.get('title')}"

        variant_title = item.get('variant_title')
        color, size = parse_variant(variant_title)

        return {
            'product_id': product_id,
            'name': item.get('name') or item.get('title'),
            'quantity': item.get('quantity'),
            'weight': item.get('grams') or 0,
            'purchase_type': PurchaseType.TO_BE_DEFINED.value,
            'supplier_po': None,
            'provider': PROVIDER_TO_BE_DEFINED,
            'variant_title': variant_title if variant_title != DEFAULT_VARIANT_TITLE else None,
            'color': color,
            'size': size,
            'local_inventory': False,
            'status': [make_status_entry(status, PRODUCT_CREATED_DESCRIPTION, now)],
        }

    @staticmethod
    def _order_tracking(shopify_order: Dict[str, Any]) -> Dict[str, str]:
        for fulfillment in shopify_order.get('fulfillments') or []:
            tracking_number = fulfillment.get('tracking_number')
            if tracking_number:
                tracking = {'tracking_number': str(tracking_number)}
                if fulfillment.get('tracking_company'):
                    tracking['carrier'] = fulfillment['tracking_company']
                return tracking
        return {}

    @staticmethod
    def _parse_created_at(value: Any, errors: Dict[str, List[str]]) -> Optional[datetime]:
        parsed = None
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, str):
            try:
                parsed = parse_datetime(value)
            except ValueError:
                parsed = None
        if parsed is None:
            errors['created_at'] = [f"Invalid creation timestamp: {value!r}"]
            return None
        if timezone.is_naive(parsed):
            parsed = timezone.make_aware(parsed, dt_timezone.utc)
        return parsed
