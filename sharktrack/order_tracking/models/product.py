"""
Standalone product mirror for Order Tracking.

The canonical product status lives inside the owning order. This table only
records which orders reference a product and which shipments carried it.
"""

import uuid
from typing import List
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone


class Product(models.Model):
    """Product known to the system, keyed by the commerce platform line item id."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product_id = models.CharField(
        max_length=64,
        unique=True,
        help_text="External product identifier"
    )
    name = models.CharField(max_length=255)
    weight = models.PositiveIntegerField(
        default=0,
        help_text="Weight in grams"
    )
    orders = models.JSONField(
        default=list,
        help_text="External ids of the orders containing this product"
    )
    tracking_numbers = models.JSONField(
        default=list,
        encoder=DjangoJSONEncoder,
        help_text="Shipments this product travelled under"
    )

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.product_id})"

    def add_order(self, order_id: str) -> bool:
        """Reference an order; returns False if it was already referenced."""
        if order_id in self.orders:
            return False
        self.orders = list(self.orders) + [order_id]
        return True

    def add_tracking(self, tracking_number: str, carrier: str, status: str,
                     consolidated_tracking_number: str = None):
        entry = {
            'tracking_number': tracking_number,
            'carrier': carrier,
            'status': status,
        }
        if consolidated_tracking_number:
            entry['consolidated_tracking_number'] = consolidated_tracking_number
        self.tracking_numbers = list(self.tracking_numbers) + [entry]

    def mark_consolidated(self, inbound: List[str], consolidated_tracking_number: str) -> int:
        """Point inbound shipments at the shipment that superseded them."""
        marked = 0
        entries = []
        for entry in self.tracking_numbers:
            if entry.get('tracking_number') in inbound and not entry.get('consolidated_tracking_number'):
                entry = dict(entry, consolidated_tracking_number=consolidated_tracking_number)
                marked += 1
            entries.append(entry)
        self.tracking_numbers = entries
        return marked
