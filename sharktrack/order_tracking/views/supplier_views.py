"""
Supplier purchase order views for Order Tracking.
"""

from rest_framework import viewsets, filters
from django_filters.rest_framework import DjangoFilterBackend

from ..models import SupplierPurchaseOrder
from ..serializers.supplier_serializers import SupplierPurchaseOrderSerializer


class SupplierPurchaseOrderViewSet(viewsets.ModelViewSet):
    queryset = SupplierPurchaseOrder.objects.all()
    serializer_class = SupplierPurchaseOrderSerializer
    lookup_field = 'po_number'
    lookup_value_regex = '[^/]+'
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['supplier_name', 'status']
    search_fields = ['po_number']
    ordering_fields = ['order_date', 'po_number', 'created_at']
    ordering = ['-order_date', 'po_number']
