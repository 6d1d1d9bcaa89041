"""
Order model for Order Tracking.

Orders are stored document-style: products, status history and tracking
information live in JSON fields on the order row.
"""

import uuid
from datetime import datetime
from typing import Dict, Any, List, Optional
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone


class PaymentStatus(models.TextChoices):
    """Payment status as reported by the commerce platform."""
    AUTHORIZED = 'authorized', 'Authorized'
    PAID = 'paid', 'Paid'
    PARTIALLY_PAID = 'partially_paid', 'Partially paid'
    PARTIALLY_REFUNDED = 'partially_refunded', 'Partially refunded'
    PENDING = 'pending', 'Pending'
    REFUNDED = 'refunded', 'Refunded'
    VOIDED = 'voided', 'Voided'


class OrderType(models.TextChoices):
    """Order classification."""
    PRE_ORDER = 'PRE_ORDER', 'Pre-Orden'
    IMMEDIATE = 'IMMEDIATE', 'Entrega Inmediata'
    REPLACEMENT = 'REPLACEMENT', 'Reemplazo'
    UNDETERMINED = 'UNDETERMINED', 'Desconocido'


class PurchaseType(models.TextChoices):
    """How a product is sourced."""
    PRE_ORDER = 'PRE_ORDER', 'Pre-Orden'
    IMMEDIATE = 'IMMEDIATE', 'Entrega Inmediata'
    REPLACEMENT = 'REPLACEMENT', 'Reemplazo'
    TO_BE_DEFINED = 'TO_BE_DEFINED', 'Por Definir'


class FulfillmentStatus(models.TextChoices):
    UNFULFILLED = 'unfulfilled', 'Unfulfilled'
    FULFILLED = 'fulfilled', 'Fulfilled'
    PARTIAL = 'partial', 'Partial'
    RESTOCKED = 'restocked', 'Restocked'


PROVIDER_TO_BE_DEFINED = 'TO_BE_DEFINED'
LOCATION_UNDETERMINED = 'UNDETERMINED'


def isoformat(value: datetime) -> str:
    return value.isoformat()


def make_status_entry(status: str, description: str = "", at: Optional[datetime] = None) -> Dict[str, Any]:
    """Build one status history entry."""
    return {
        'status': status,
        'description': description,
        'updated_at': isoformat(at or timezone.now()),
    }


def default_tracking_info() -> Dict[str, Any]:
    return {'order_tracking': {}, 'product_trackings': []}


def default_fulfillment_status() -> Dict[str, Any]:
    return {'status': FulfillmentStatus.UNFULFILLED.value}


def default_flags() -> Dict[str, Any]:
    return {'dual_delay': False, 'delivery_delay': False}


def default_order_details() -> Dict[str, Any]:
    return {'products': [], 'total_weight': 0, 'provider_info': []}


def product_current_status(product: Dict[str, Any]) -> Optional[str]:
    """Status of the last entry in a product's status list."""
    history = product.get('status') or []
    if not history:
        return None
    return history[-1].get('status')


def product_has_reached(product: Dict[str, Any], status: str) -> bool:
    """Whether the product's status history contains the given status."""
    return any(entry.get('status') == status for entry in product.get('status') or [])


class Order(models.Model):
    """
    An order imported from the commerce platform.

    Tracks the order-level status history, the embedded products with their
    own status lists, and the tracking information attached along the way.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    shopify_order_id = models.CharField(
        max_length=64,
        unique=True,
        help_text="Order identifier on the commerce platform"
    )
    shopify_order_number = models.CharField(
        max_length=64,
        help_text="Human readable order number (e.g. #1001)"
    )
    shopify_order_link = models.URLField(
        max_length=500,
        help_text="Link to the order in the commerce platform admin"
    )

    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    order_type = models.CharField(
        max_length=20,
        choices=OrderType.choices,
        default=OrderType.UNDETERMINED,
    )
    location = models.CharField(
        max_length=50,
        default=LOCATION_UNDETERMINED,
        help_text="Classified location bucket of the order"
    )

    # Status tracking
    current_status = models.JSONField(
        default=dict,
        encoder=DjangoJSONEncoder,
        help_text="Snapshot of the last status history entry"
    )
    status_history = models.JSONField(
        default=list,
        encoder=DjangoJSONEncoder,
        help_text="Append-only list of order status entries"
    )

    # Embedded documents
    order_details = models.JSONField(
        default=default_order_details,
        encoder=DjangoJSONEncoder,
        help_text="Products and aggregate metrics"
    )
    tracking_info = models.JSONField(
        default=default_tracking_info,
        encoder=DjangoJSONEncoder,
        help_text="Order-level tracking and inbound product trackings"
    )
    fulfillment_status = models.JSONField(
        default=default_fulfillment_status,
        encoder=DjangoJSONEncoder,
    )
    flags = models.JSONField(
        default=default_flags,
        encoder=DjangoJSONEncoder,
    )
    processing_time_in_dual = models.PositiveIntegerField(
        default=0,
        help_text="Days spent with the freight forwarder"
    )

    created_at = models.DateTimeField(
        default=timezone.now,
        help_text="Creation time on the commerce platform"
    )
    updated_at = models.DateTimeField(
        default=timezone.now,
        help_text="Last write performed by this service"
    )

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['payment_status'], name='order_track_payment_7c1e0b_idx'),
            models.Index(fields=['order_type'], name='order_track_order_t_3f9a2d_idx'),
            models.Index(fields=['created_at'], name='order_track_created_a4b6e1_idx'),
        ]

    def __str__(self):
        return f"Order {self.shopify_order_number} ({self.shopify_order_id})"

    @property
    def products(self) -> List[Dict[str, Any]]:
        return self.order_details.setdefault('products', [])

    @property
    def status(self) -> Optional[str]:
        return (self.current_status or {}).get('status')

    def find_product(self, product_id: str) -> Optional[Dict[str, Any]]:
        for product in self.products:
            if product.get('product_id') == product_id:
                return product
        return None

    def append_status(self, status: str, description: str = "", at: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Append a status entry and make it the current status.

        This is the only way the order's status should change after creation.
        """
        entry = make_status_entry(status, description, at)
        self.status_history = list(self.status_history or []) + [entry]
        self.current_status = dict(entry)
        return entry

    def touch(self, at: Optional[datetime] = None):
        self.updated_at = at or timezone.now()
