"""
Order Tracking Services
"""

from .workflow import (
    ProductWorkflow, OrderWorkflow, validate_product_workflow, validate_order_workflow
)
from .status_registry import (
    StatusRegistry, load_registry, reload_registry, get_registry, install_registry
)
from .order_mapper import OrderMapper
from .reconciliation import ReconciliationEngine, ReconciliationDiff, ComparisonSpec, FieldRule
from .status_service import StatusService
from .consolidation_service import ConsolidationService
from .product_service import ProductService
from .sync_service import OrderSyncService, SyncSummary, trailing_window, calendar_month_window

__all__ = [
    # Workflow validators
    'ProductWorkflow', 'OrderWorkflow',
    'validate_product_workflow', 'validate_order_workflow',

    # Status registry
    'StatusRegistry', 'load_registry', 'reload_registry', 'get_registry', 'install_registry',

    # Mapping and reconciliation
    'OrderMapper', 'ReconciliationEngine', 'ReconciliationDiff', 'ComparisonSpec', 'FieldRule',

    # Services
    'StatusService', 'ConsolidationService', 'ProductService',
    'OrderSyncService', 'SyncSummary', 'trailing_window', 'calendar_month_window',
]
