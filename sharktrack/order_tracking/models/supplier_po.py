"""
Supplier purchase order model for Order Tracking.
"""

import uuid
from django.db import models
from django.utils import timezone


class Supplier(models.TextChoices):
    TEMU = 'TEMU', 'TEMU'
    ALIEXPRESS = 'AliExpress', 'AliExpress'
    ALIBABA = 'Alibaba', 'Alibaba'


class SupplierPOStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pendiente'
    CONFIRMED = 'CONFIRMED', 'Confirmado'
    IN_PROCESS = 'IN_PROCESS', 'En Proceso'
    RECEIVED = 'RECEIVED', 'Recibido'
    CANCELLED = 'CANCELLED', 'Cancelado'


class SupplierPurchaseOrder(models.Model):
    """
    Purchase order placed with a supplier for pre-ordered products.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    po_number = models.CharField(
        max_length=100,
        unique=True,
        help_text="Purchase order number on the supplier side"
    )
    supplier_name = models.CharField(
        max_length=20,
        choices=Supplier.choices,
    )
    order_date = models.DateField()
    status = models.CharField(
        max_length=20,
        choices=SupplierPOStatus.choices,
        default=SupplierPOStatus.PENDING,
    )
    products = models.JSONField(default=list, blank=True, help_text="External product ids")
    orders = models.JSONField(default=list, blank=True, help_text="External order ids")
    tracking_numbers = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-order_date', 'po_number']

    def __str__(self):
        return f"PO {self.po_number} - {self.supplier_name} ({self.status})"

    def link(self, order_id: str, product_id: str):
        """Reference an order line from this purchase order."""
        if product_id not in self.products:
            self.products = list(self.products) + [product_id]
        if order_id not in self.orders:
            self.orders = list(self.orders) + [order_id]
