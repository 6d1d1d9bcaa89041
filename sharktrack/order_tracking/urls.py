"""
URL configuration for Order Tracking.

Provides API endpoints for orders, consolidation, sync, statuses, supplier
purchase orders and shipment tracking. No trailing slashes.
"""

from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import (
    OrderViewSet, SupplierPurchaseOrderViewSet,
    ConsolidateProductsView, PrepareProductsView, SyncOrdersView,
    StatusListView, StatusReloadView, TrackerCreateView, TrackerResultsView,
)

# Create router and register viewsets
router = DefaultRouter(trailing_slash=False)
router.register(r'orders', OrderViewSet, basename='order')
router.register(r'supplier-purchase-orders', SupplierPurchaseOrderViewSet, basename='supplier-po')

# URL patterns
urlpatterns = [
    path('sync-orders', SyncOrdersView.as_view(), name='sync-orders'),
    path('consolidate-products/<str:order_id>', ConsolidateProductsView.as_view(), name='consolidate-products'),
    path('prepare-products/<str:order_id>', PrepareProductsView.as_view(), name='prepare-products'),
    path('statuses', StatusListView.as_view(), name='status-list'),
    path('statuses/reload', StatusReloadView.as_view(), name='status-reload'),
    path('tracking/create', TrackerCreateView.as_view(), name='tracker-create'),
    path('tracking/results', TrackerResultsView.as_view(), name='tracker-results'),
] + router.urls
