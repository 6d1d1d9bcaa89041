"""
Order Tracking Models
"""

from .status import (
    Status, StatusKind, ProductStatus, OrderTrackStatus, DEFAULT_CUSTOMER_LABELS
)
from .order import (
    Order, PaymentStatus, OrderType, PurchaseType, FulfillmentStatus,
    PROVIDER_TO_BE_DEFINED, LOCATION_UNDETERMINED,
    make_status_entry, product_current_status, product_has_reached,
)
from .product import Product
from .tracking_number import TrackingNumber
from .supplier_po import SupplierPurchaseOrder, Supplier, SupplierPOStatus

__all__ = [
    # Status vocabulary
    'Status', 'StatusKind', 'ProductStatus', 'OrderTrackStatus',
    'DEFAULT_CUSTOMER_LABELS',

    # Order models
    'Order', 'PaymentStatus', 'OrderType', 'PurchaseType', 'FulfillmentStatus',
    'PROVIDER_TO_BE_DEFINED', 'LOCATION_UNDETERMINED',
    'make_status_entry', 'product_current_status', 'product_has_reached',

    # Product mirror
    'Product',

    # Shipments
    'TrackingNumber',

    # Supplier purchase orders
    'SupplierPurchaseOrder', 'Supplier', 'SupplierPOStatus',
]
