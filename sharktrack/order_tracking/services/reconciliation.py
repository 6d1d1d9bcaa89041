"""
Reconciliation engine for Order Tracking.

Decides whether a freshly mapped order differs from the stored one. What is
compared is data: a versioned ComparisonSpec listing field paths and their
equality rules. Adding a comparable field means adding a FieldRule.
"""

import operator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..models import Order
from .order_mapper import VARIANT_JOINER, build_variant_title, normalize_variant_title, variant_segments

MISSING = object()


def get_path(document: Dict[str, Any], path: str, default: Any = MISSING) -> Any:
    """Resolve a dotted path inside nested dicts."""
    value: Any = document
    for key in path.split('.'):
        if not isinstance(value, dict) or key not in value:
            return None if default is MISSING else default
        value = value[key]
    return value


def same_instant(incoming: Any, persisted: Any) -> bool:
    """Timestamps match when they denote the same instant, at second precision."""
    if isinstance(incoming, datetime) and isinstance(persisted, datetime):
        return incoming.replace(microsecond=0) == persisted.replace(microsecond=0)
    return incoming == persisted


@dataclass(frozen=True)
class FieldRule:
    """
    One comparable field.

    `path` is read from both documents unless a side has its own extractor.
    """
    path: str
    equals: Callable[[Any, Any], bool] = operator.eq
    incoming: Optional[Callable[[Dict[str, Any]], Any]] = None
    persisted: Optional[Callable[[Dict[str, Any]], Any]] = None

    def incoming_value(self, document: Dict[str, Any]) -> Any:
        return self.incoming(document) if self.incoming else get_path(document, self.path)

    def persisted_value(self, document: Dict[str, Any]) -> Any:
        return self.persisted(document) if self.persisted else get_path(document, self.path)


def persisted_variant_title(product: Dict[str, Any]) -> Optional[str]:
    """
    Variant descriptor rebuilt from the stored color and size.

    Segments past the second exist only in the stored variant_title and are
    appended from there.
    """
    base = build_variant_title(product.get('color'), product.get('size'))
    extra = variant_segments(product.get('variant_title'))[2:]
    return VARIANT_JOINER.join([base] + extra) if base and extra else base


@dataclass(frozen=True)
class ComparisonSpec:
    version: int
    order_fields: Tuple[FieldRule, ...]
    tracking_fields: Tuple[FieldRule, ...]
    product_fields: Tuple[FieldRule, ...]


COMPARISON_SPEC = ComparisonSpec(
    version=2,
    order_fields=(
        FieldRule('shopify_order_id'),
        FieldRule('shopify_order_number'),
        FieldRule('shopify_order_link'),
        FieldRule('payment_status'),
        FieldRule('location'),
        FieldRule('created_at', equals=same_instant),
    ),
    tracking_fields=(
        FieldRule('tracking_info.order_tracking.carrier'),
        FieldRule('tracking_info.order_tracking.tracking_number'),
    ),
    product_fields=(
        FieldRule('product_id'),
        FieldRule('name'),
        FieldRule('quantity'),
        FieldRule('weight'),
        FieldRule(
            'variant_title',
            incoming=lambda product: normalize_variant_title(product.get('variant_title')),
            persisted=persisted_variant_title,
        ),
    ),
)


@dataclass
class Mismatch:
    path: str
    incoming: Any
    persisted: Any


@dataclass
class ReconciliationDiff:
    """Outcome of comparing an incoming order with the stored one."""
    comparison_version: int
    mismatches: List[Mismatch] = field(default_factory=list)

    @property
    def is_equivalent(self) -> bool:
        return not self.mismatches

    def describe(self) -> str:
        if self.is_equivalent:
            return "equivalent"
        first = self.mismatches[0]
        return f"{first.path}: {first.persisted!r} -> {first.incoming!r}"


def order_document(order: Order) -> Dict[str, Any]:
    """Fields of a stored order that reconciliation reads."""
    return {
        'shopify_order_id': order.shopify_order_id,
        'shopify_order_number': order.shopify_order_number,
        'shopify_order_link': order.shopify_order_link,
        'payment_status': order.payment_status,
        'location': order.location,
        'created_at': order.created_at,
        'tracking_info': order.tracking_info or {},
        'order_details': order.order_details or {},
    }


class ReconciliationEngine:
    """Compares and merges incoming orders against stored ones."""

    def __init__(self, spec: ComparisonSpec = COMPARISON_SPEC):
        self.spec = spec

    def compare(self, incoming: Dict[str, Any], persisted: Dict[str, Any]) -> ReconciliationDiff:
        """
        Compare two order documents.

        Stops at the first mismatch: top-level fields first, then order-level
        tracking when both sides have it, then the product list.
        """
        diff = ReconciliationDiff(comparison_version=self.spec.version)

        for rule in self.spec.order_fields:
            if self._check(rule, incoming, persisted, rule.path, diff):
                return diff

        incoming_tracking = get_path(incoming, 'tracking_info.order_tracking') or {}
        persisted_tracking = get_path(persisted, 'tracking_info.order_tracking') or {}
        if incoming_tracking and persisted_tracking:
            for rule in self.spec.tracking_fields:
                if self._check(rule, incoming, persisted, rule.path, diff):
                    return diff

        incoming_products = get_path(incoming, 'order_details.products') or []
        persisted_products = get_path(persisted, 'order_details.products') or []
        if len(incoming_products) != len(persisted_products):
            diff.mismatches.append(Mismatch(
                'order_details.products.length', len(incoming_products), len(persisted_products)
            ))
            return diff

        for index, (incoming_product, persisted_product) in enumerate(zip(incoming_products, persisted_products)):
            for rule in self.spec.product_fields:
                path = f'order_details.products[{index}].{rule.path}'
                if self._check(rule, incoming_product, persisted_product, path, diff):
                    return diff

        return diff

    @staticmethod
    def _check(rule: FieldRule, incoming: Dict[str, Any], persisted: Dict[str, Any],
               path: str, diff: ReconciliationDiff) -> bool:
        incoming_value = rule.incoming_value(incoming)
        persisted_value = rule.persisted_value(persisted)
        if rule.equals(incoming_value, persisted_value):
            return False
        diff.mismatches.append(Mismatch(path, incoming_value, persisted_value))
        return True

    @staticmethod
    def merge(incoming: Dict[str, Any], order: Order, now: datetime) -> Order:
        """
        Replace the platform-owned fields of a stored order.

        The product list is replaced wholesale; operational state is carried
        over: status history, current status, attached tracking, fulfillment
        status, flags, order type, and each surviving product's status list
        and purchase details.
        """
        order.shopify_order_number = incoming['shopify_order_number']
        order.shopify_order_link = incoming['shopify_order_link']
        order.payment_status = incoming['payment_status']
        order.location = incoming['location']
        order.created_at = incoming['created_at']

        stored_products = {p.get('product_id'): p for p in order.products}
        products = []
        for product in incoming['order_details']['products']:
            merged = dict(product)
            stored = stored_products.get(product['product_id'])
            if stored is not None:
                for key in ('status', 'purchase_type', 'supplier_po', 'provider', 'local_inventory'):
                    if key in stored:
                        merged[key] = stored[key]
            products.append(merged)

        details = dict(order.order_details or {})
        details['products'] = products
        details['total_weight'] = incoming['order_details'].get('total_weight', 0)
        details.setdefault('provider_info', [])
        order.order_details = details

        tracking_info = dict(order.tracking_info or {})
        if not tracking_info.get('order_tracking'):
            tracking_info['order_tracking'] = dict(incoming['tracking_info'].get('order_tracking') or {})
        tracking_info.setdefault('product_trackings', [])
        order.tracking_info = tracking_info

        order.touch(now)
        return order
