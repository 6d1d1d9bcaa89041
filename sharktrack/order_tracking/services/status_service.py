"""
Status Service for Order Tracking.

Manual status moves: product milestones on the way to the operator's
facility, order milestones after preparation, and inbound supplier tracking.
"""

import logging
from django.db import transaction
from django.utils import timezone

from ..exceptions import NotFoundException, ValidationException
from ..models import (
    Order, Product, StatusKind, TrackingNumber, make_status_entry, product_current_status,
)
from .status_registry import StatusRegistry
from .workflow import validate_order_workflow, validate_product_workflow

logger = logging.getLogger(__name__)


def get_order_for_update(order_id: str) -> Order:
    """
    Lock an order row by its commerce platform id.

    Must be called inside transaction.atomic().

    Raises:
        NotFoundException: If no such order exists
    """
    try:
        return Order.objects.select_for_update().get(shopify_order_id=order_id)
    except Order.DoesNotExist:
        raise NotFoundException("Order", order_id)


def get_product_or_404(order: Order, product_id: str) -> dict:
    product = order.find_product(product_id)
    if product is None:
        raise NotFoundException("Product", f"{product_id} in order {order.shopify_order_id}")
    return product


def shipments_for_order(order_id: str):
    """TrackingNumber rows that reference an order, locked for update."""
    candidates = TrackingNumber.objects.select_for_update().filter(orders__icontains=f'"{order_id}"')
    return [shipment for shipment in candidates if order_id in shipment.orders]


class StatusService:
    """Service class for manual status transitions."""

    @staticmethod
    def advance_product_status(order_id: str, product_id: str, status: str,
                               registry: StatusRegistry, description: str = "") -> Order:
        """
        Move one product forward on the product track.

        Args:
            order_id: Commerce platform order id
            product_id: External product id within the order
            status: Target product status code
            registry: Loaded status registry
            description: Optional note stored on the status entry

        Returns:
            Updated Order instance

        Raises:
            ValidationException: If the status is not a registered product status
            InvalidTransitionException: If the move is backward, repeated or
                reserved for consolidation
            NotFoundException: If the order or product does not exist
        """
        registry.validate(StatusKind.PRODUCT, status)

        with transaction.atomic():
            order = get_order_for_update(order_id)
            product = get_product_or_404(order, product_id)

            current = product_current_status(product)
            validate_product_workflow(current, status)

            now = timezone.now()
            product['status'] = list(product.get('status') or []) + [
                make_status_entry(status, description, now)
            ]
            order.touch(now)
            order.save(update_fields=['order_details', 'updated_at'])

            logger.info(f"Product {product_id} of order {order_id} moved from {current} to {status}")
            return order

    @staticmethod
    def advance_order_status(order_id: str, status: str, registry: StatusRegistry,
                             description: str = "") -> Order:
        """
        Move an order one step along the order track.

        The order's associations in every shipment it travels in take the
        same status.

        Args:
            order_id: Commerce platform order id
            status: Target order status code
            registry: Loaded status registry
            description: Optional note stored on the history entry

        Returns:
            Updated Order instance

        Raises:
            ValidationException: If the status is not a registered order status
            InvalidTransitionException: If the move skips or reverses a step
            NotFoundException: If the order does not exist
        """
        registry.validate(StatusKind.ORDER, status)

        with transaction.atomic():
            order = get_order_for_update(order_id)

            previous = order.status
            validate_order_workflow(previous, status)

            now = timezone.now()
            order.append_status(status, description, now)
            order.touch(now)
            order.save(update_fields=['status_history', 'current_status', 'updated_at'])

            updated = 0
            for shipment in shipments_for_order(order_id):
                updated += shipment.set_order_status(order_id, status)
                shipment.save(update_fields=['products', 'updated_at'])

            logger.info(
                f"Order {order_id} moved from {previous} to {status} "
                f"({updated} shipment associations updated)"
            )
            return order

    @staticmethod
    def attach_product_tracking(order_id: str, product_id: str, carrier: str,
                                tracking_number: str, registry: StatusRegistry) -> Order:
        """
        Record the supplier shipment a product travels in.

        Raises:
            ValidationException: If carrier or tracking number is missing
            NotFoundException: If the order or product does not exist
        """
        errors = {}
        if not carrier:
            errors['carrier'] = ['Carrier is required']
        if not tracking_number:
            errors['trackingNumber'] = ['Tracking number is required']
        if errors:
            raise ValidationException("Invalid product tracking", errors)

        with transaction.atomic():
            order = get_order_for_update(order_id)
            product = get_product_or_404(order, product_id)
            status = registry.validate(StatusKind.PRODUCT, product_current_status(product))

            now = timezone.now()
            tracking_info = dict(order.tracking_info or {})
            tracking_info['product_trackings'] = list(tracking_info.get('product_trackings') or []) + [{
                'product_id': product_id,
                'carrier': carrier,
                'tracking_number': tracking_number,
                'consolidated_tracking_number': None,
                'added_at': now.isoformat(),
            }]
            order.tracking_info = tracking_info
            order.touch(now)
            order.save(update_fields=['tracking_info', 'updated_at'])

            mirror = get_or_create_mirror(product)
            mirror.add_order(order_id)
            mirror.add_tracking(tracking_number, carrier, status)
            mirror.save()

            logger.info(f"Tracking {carrier} {tracking_number} attached to product {product_id} of order {order_id}")
            return order


def get_or_create_mirror(product: dict) -> Product:
    mirror, created = Product.objects.select_for_update().get_or_create(
        product_id=product['product_id'],
        defaults={'name': product.get('name') or '', 'weight': product.get('weight') or 0},
    )
    if created:
        logger.debug(f"Product mirror created for {product['product_id']}")
    return mirror
