"""
Order Tracking Views
"""

from .order_views import OrderViewSet
from .transition_views import ConsolidateProductsView, PrepareProductsView, SyncOrdersView
from .status_views import StatusListView, StatusReloadView, health
from .supplier_views import SupplierPurchaseOrderViewSet
from .tracking_views import TrackerCreateView, TrackerResultsView

__all__ = [
    'OrderViewSet',
    'ConsolidateProductsView',
    'PrepareProductsView',
    'SyncOrdersView',
    'StatusListView',
    'StatusReloadView',
    'health',
    'SupplierPurchaseOrderViewSet',
    'TrackerCreateView',
    'TrackerResultsView',
]
