"""
Tracking number model for Order Tracking.
"""

import uuid
from typing import List
from django.db import models
from django.utils import timezone


class TrackingNumber(models.Model):
    """
    One physical shipment.

    References products and orders by identifier only. Created when products
    are consolidated and updated as delivery milestones are confirmed.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tracking_number = models.CharField(
        max_length=100,
        help_text="Carrier tracking number, or the sentinel for untracked carriers"
    )
    carrier = models.CharField(
        max_length=100,
        help_text="Carrier handling the shipment"
    )
    products = models.JSONField(
        default=list,
        help_text="Ordered {product_id, order_id, status} associations"
    )
    orders = models.JSONField(
        default=list,
        help_text="External ids of the orders in this shipment"
    )
    is_consolidated = models.BooleanField(
        default=False,
        help_text="Whether this shipment bundles several products"
    )
    consolidated_from = models.JSONField(
        default=list,
        help_text="Tracking numbers superseded by this shipment"
    )

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['carrier', 'tracking_number'], name='order_track_carrier_5d2c8f_idx'),
        ]

    def __str__(self):
        return f"{self.carrier} {self.tracking_number}"

    def set_order_status(self, order_id: str, status: str) -> int:
        """Set the status of every association belonging to an order."""
        updated = 0
        products: List[dict] = []
        for association in self.products:
            if association.get('order_id') == order_id:
                association = dict(association, status=status)
                updated += 1
            products.append(association)
        self.products = products
        return updated
