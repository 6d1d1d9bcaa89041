"""
Supplier purchase order serializers for Order Tracking.
"""

from rest_framework import serializers

from ..models import SupplierPurchaseOrder


class SupplierPurchaseOrderSerializer(serializers.ModelSerializer):
    """Serializer for SupplierPurchaseOrder model."""

    class Meta:
        model = SupplierPurchaseOrder
        fields = [
            'id', 'po_number', 'supplier_name', 'order_date', 'status',
            'products', 'orders', 'tracking_numbers', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'products', 'orders', 'created_at', 'updated_at']

    def validate_po_number(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("PO number cannot be blank")
        return value

    def validate_tracking_numbers(self, value):
        if not all(isinstance(number, str) and number for number in value):
            raise serializers.ValidationError("Tracking numbers must be non-empty strings")
        return value
