"""
Django admin configuration for Order Tracking.
"""

from django.contrib import admin
from .models import Order, Product, Status, TrackingNumber, SupplierPurchaseOrder


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['shopify_order_number', 'shopify_order_id', 'status', 'payment_status', 'order_type', 'created_at']
    list_filter = ['payment_status', 'order_type', 'location', 'created_at']
    search_fields = ['shopify_order_id', 'shopify_order_number']
    # Status fields change only through the service layer
    readonly_fields = ['id', 'shopify_order_id', 'current_status', 'status_history', 'updated_at']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['product_id', 'name', 'weight', 'updated_at']
    search_fields = ['product_id', 'name']
    readonly_fields = ['id', 'orders', 'tracking_numbers', 'created_at', 'updated_at']


@admin.register(Status)
class StatusAdmin(admin.ModelAdmin):
    list_display = ['kind', 'position', 'internal_code', 'customer_label']
    list_filter = ['kind']
    search_fields = ['internal_code', 'customer_label']
    ordering = ['kind', 'position']


@admin.register(TrackingNumber)
class TrackingNumberAdmin(admin.ModelAdmin):
    list_display = ['tracking_number', 'carrier', 'is_consolidated', 'created_at']
    list_filter = ['carrier', 'is_consolidated', 'created_at']
    search_fields = ['tracking_number']
    readonly_fields = ['id', 'created_at', 'updated_at']


@admin.register(SupplierPurchaseOrder)
class SupplierPurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ['po_number', 'supplier_name', 'status', 'order_date']
    list_filter = ['supplier_name', 'status', 'order_date']
    search_fields = ['po_number']
    readonly_fields = ['id', 'created_at', 'updated_at']
