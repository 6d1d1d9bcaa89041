"""
Order serializers for Order Tracking.
"""

from typing import Any, Dict, Optional

from rest_framework import serializers

from ..models import Order, PurchaseType, StatusKind, product_current_status
from ..services.workflow import OrderWorkflow, ProductWorkflow


def _label(registry, kind: Optional[str], code: Optional[str]) -> Optional[str]:
    """Customer label for a code, or None when it is not in the loaded registry."""
    if registry is None or code is None:
        return None
    if kind is None:
        if registry.is_valid(StatusKind.ORDER, code) or registry.is_valid(StatusKind.PRODUCT, code):
            return registry.order_label_for(code)
        return None
    if registry.is_valid(kind, code):
        return registry.label_for(kind, code)
    return None


class RegistryLabelMixin:
    """Adds customer labels from the registry passed in the serializer context."""

    @property
    def registry(self):
        return self.context.get('registry')

    def labelled_entry(self, entry: Dict[str, Any], kind: Optional[str] = None) -> Dict[str, Any]:
        if not entry:
            return entry
        return dict(entry, customer_label=_label(self.registry, kind, entry.get('status')))

    def get_current_status(self, obj):
        return self.labelled_entry(obj.current_status)

    def get_status_history(self, obj):
        return [self.labelled_entry(entry) for entry in obj.status_history or []]

    def get_order_details(self, obj):
        """Order details with each product's current status, label and open moves."""
        details = dict(obj.order_details or {})
        products = []
        for product in obj.products:
            current = product_current_status(product)
            products.append(dict(
                product,
                current_status=current,
                customer_label=_label(self.registry, StatusKind.PRODUCT, current),
                next_statuses=ProductWorkflow.next_statuses(current),
            ))
        details['products'] = products
        return details


class OrderListSerializer(RegistryLabelMixin, serializers.ModelSerializer):
    """Serializer for order lists."""

    current_status = serializers.SerializerMethodField()
    status_history = serializers.SerializerMethodField()
    order_details = serializers.SerializerMethodField()
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'shopify_order_id', 'shopify_order_number', 'shopify_order_link',
            'payment_status', 'order_type', 'location',
            'current_status', 'status_history', 'order_details', 'tracking_info',
            'fulfillment_status', 'flags', 'product_count', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_product_count(self, obj):
        return len(obj.products)


class OrderDetailSerializer(RegistryLabelMixin, serializers.ModelSerializer):
    """Detailed serializer for a single order."""

    current_status = serializers.SerializerMethodField()
    status_history = serializers.SerializerMethodField()
    order_details = serializers.SerializerMethodField()
    next_statuses = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'shopify_order_id', 'shopify_order_number', 'shopify_order_link',
            'payment_status', 'order_type', 'location',
            'current_status', 'next_statuses', 'status_history', 'order_details', 'tracking_info',
            'fulfillment_status', 'flags', 'processing_time_in_dual',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_next_statuses(self, obj):
        return OrderWorkflow.next_statuses(obj.status)


class ConsolidateSerializer(serializers.Serializer):
    """Request body for consolidating an order's products."""

    carrier = serializers.CharField(max_length=100)
    trackingNumber = serializers.CharField(
        source='tracking_number', max_length=100, required=False, allow_blank=True, allow_null=True
    )


class PrepareSerializer(serializers.Serializer):
    """Request body for preparing an order."""

    trackingNumber = serializers.CharField(
        source='tracking_number', max_length=100, required=False, allow_blank=True, allow_null=True
    )
    carrier = serializers.CharField(max_length=100, required=False, allow_blank=True)


class StatusUpdateSerializer(serializers.Serializer):
    """Request body for manual status moves."""

    status = serializers.CharField(max_length=50)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


class ProductTrackingSerializer(serializers.Serializer):
    """Request body for attaching a supplier shipment to a product."""

    carrier = serializers.CharField(max_length=100)
    trackingNumber = serializers.CharField(source='tracking_number', max_length=100)


class PurchaseDetailsSerializer(serializers.Serializer):
    """Request body for a product's purchase details."""

    purchaseType = serializers.ChoiceField(source='purchase_type', choices=PurchaseType.choices)
    supplierPO = serializers.CharField(
        source='supplier_po', max_length=100, required=False, allow_blank=True, allow_null=True
    )
    provider = serializers.CharField(max_length=100, required=False, allow_blank=True)

    def validate(self, data):
        """Pre-orders must reference a supplier purchase order."""
        if data['purchase_type'] == PurchaseType.PRE_ORDER and not data.get('supplier_po'):
            raise serializers.ValidationError({'supplierPO': 'Required for pre-orders'})
        return data
