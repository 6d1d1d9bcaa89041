"""
Product Service for Order Tracking.

Maintains how each product of an order is sourced.
"""

import logging
from typing import Dict, Any, List, Optional

from django.db import transaction
from django.utils import timezone

from ..exceptions import NotFoundException, ValidationException
from ..models import Order, OrderType, PurchaseType, SupplierPurchaseOrder
from .status_service import get_order_for_update, get_product_or_404

logger = logging.getLogger(__name__)


def derive_order_type(products: List[Dict[str, Any]]) -> str:
    """
    Classify an order from its products' purchase types.

    All products sharing one defined purchase type give that type; anything
    else is UNDETERMINED.
    """
    kinds = {product.get('purchase_type') for product in products}
    if len(kinds) == 1:
        kind = kinds.pop()
        if kind in OrderType.values:
            return kind
    return OrderType.UNDETERMINED.value


class ProductService:
    """Service class for product sourcing details."""

    @staticmethod
    def update_purchase_details(order_id: str, product_id: str, purchase_type: str,
                                supplier_po: Optional[str] = None, provider: Optional[str] = None) -> Order:
        """
        Set the purchase type, supplier purchase order and provider of a product.

        Args:
            order_id: Commerce platform order id
            product_id: External product id within the order
            purchase_type: One of PurchaseType
            supplier_po: Supplier PO number, required for pre-orders
            provider: Provider name, left unchanged when omitted

        Returns:
            Updated Order instance

        Raises:
            ValidationException: If the combination is not allowed
            NotFoundException: If the order, product or supplier PO does not exist
        """
        if purchase_type not in PurchaseType.values:
            raise ValidationException(
                f"Unknown purchase type: {purchase_type}",
                {'purchaseType': [f"'{purchase_type}' is not one of {PurchaseType.values}"]}
            )
        if purchase_type == PurchaseType.PRE_ORDER and not supplier_po:
            raise ValidationException(
                "Pre-order products require a supplier purchase order",
                {'supplierPO': ['This field is required for pre-orders']}
            )
        if purchase_type != PurchaseType.PRE_ORDER and supplier_po:
            raise ValidationException(
                "Only pre-order products reference a supplier purchase order",
                {'supplierPO': ['Must be empty unless the purchase type is PRE_ORDER']}
            )

        with transaction.atomic():
            order = get_order_for_update(order_id)
            product = get_product_or_404(order, product_id)

            if supplier_po:
                try:
                    purchase_order = SupplierPurchaseOrder.objects.select_for_update().get(po_number=supplier_po)
                except SupplierPurchaseOrder.DoesNotExist:
                    raise NotFoundException("SupplierPurchaseOrder", supplier_po)
                purchase_order.link(order_id, product_id)
                purchase_order.save(update_fields=['products', 'orders', 'updated_at'])

            product['purchase_type'] = purchase_type
            product['supplier_po'] = supplier_po or None
            if provider:
                product['provider'] = provider

            order.order_type = derive_order_type(order.products)
            order.touch(timezone.now())
            order.save(update_fields=['order_details', 'order_type', 'updated_at'])

            suffix = f" under PO {supplier_po}" if supplier_po else ""
            logger.info(f"Product {product_id} of order {order_id} set to {purchase_type}{suffix}")
            return order
