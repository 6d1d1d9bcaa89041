"""
Consolidation Service for Order Tracking.

Handles the two pivotal transitions: bundling every product of an order into
one onward shipment, and preparing the order for the local carrier.
"""

import logging
from typing import Dict, Any, List, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from ..exceptions import PreconditionFailedException, ValidationException
from ..models import (
    Order, Product, ProductStatus, OrderTrackStatus, FulfillmentStatus, StatusKind,
    TrackingNumber, make_status_entry, product_current_status, product_has_reached,
)
from .status_registry import StatusRegistry
from .status_service import get_order_for_update

logger = logging.getLogger(__name__)

NO_TRACKING = 'NO-TRACKING'

GATE_EVER_REACHED = 'ever_reached'
GATE_CURRENT = 'current'

CONSOLIDATED_DESCRIPTION = 'Productos Consolidados'
PREPARED_DESCRIPTION = 'Orden preparada para envío'


def resolve_carrier(carrier: Optional[str], carriers: Dict[str, Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Look up a carrier in the carrier table.

    Raises:
        ValidationException: If the carrier is missing or unknown
    """
    carriers = settings.CARRIERS if carriers is None else carriers
    if not carrier:
        raise ValidationException("Carrier is required", {'carrier': ['This field is required']})
    if carrier not in carriers:
        raise ValidationException(
            f"Unknown carrier: {carrier}",
            {'carrier': [f"'{carrier}' is not a known carrier"], 'allowed': sorted(carriers)}
        )
    return carriers[carrier]


def assign_tracking_number(carrier: str, tracking_number: Optional[str],
                           carriers: Dict[str, Dict[str, Any]] = None) -> str:
    """
    Pick the shipment number for a consolidation.

    Carriers that issue trackable numbers need the operator's number;
    the rest always get the NO-TRACKING sentinel.

    Raises:
        ValidationException: If the carrier is unknown or a required number is missing
    """
    rules = resolve_carrier(carrier, carriers)
    if not rules.get('requires_tracking', True):
        return NO_TRACKING
    tracking_number = (tracking_number or '').strip()
    if not tracking_number:
        raise ValidationException(
            f"Carrier {carrier} requires a tracking number",
            {'trackingNumber': ['This field is required for this carrier']}
        )
    return tracking_number


def unreceived_products(order: Order, gate: str = None) -> List[str]:
    """Product ids that do not satisfy the consolidation gate."""
    gate = gate or settings.CONSOLIDATION_GATE
    received = ProductStatus.RECEIVED_BY_OPERATOR
    failing = []
    for product in order.products:
        if gate == GATE_CURRENT:
            ok = product_current_status(product) == received
        else:
            ok = product_has_reached(product, received)
        if not ok:
            failing.append(product.get('product_id'))
    return failing


class ConsolidationService:
    """Service class for consolidation and preparation."""

    @staticmethod
    def consolidate_products(order_id: str, carrier: str, tracking_number: Optional[str],
                             registry: StatusRegistry) -> TrackingNumber:
        """
        Consolidate every product of an order into one shipment.

        The order document, the new TrackingNumber and the product mirrors
        are written in a single transaction.

        Args:
            order_id: Commerce platform order id
            carrier: Carrier code from the CARRIERS table
            tracking_number: Operator supplied number, required for tracked carriers
            registry: Loaded status registry

        Returns:
            Created TrackingNumber instance

        Raises:
            ValidationException: On carrier problems or unregistered statuses
            PreconditionFailedException: If some product has not been received
            NotFoundException: If the order does not exist
        """
        shipment_number = assign_tracking_number(carrier, tracking_number)
        status = ProductStatus.CONSOLIDATED.value
        registry.validate(StatusKind.PRODUCT, status)
        registry.validate_order_status(status)

        with transaction.atomic():
            order = get_order_for_update(order_id)

            if not order.products:
                raise PreconditionFailedException(
                    f"Order {order_id} has no products to consolidate",
                    condition="has_products",
                )

            failing = unreceived_products(order)
            if failing:
                raise PreconditionFailedException(
                    f"Not every product of order {order_id} has been received",
                    condition="all_products_received",
                    details={"products": failing, "required_status": ProductStatus.RECEIVED_BY_OPERATOR.value},
                )

            now = timezone.now()
            for product in order.products:
                product['status'] = list(product.get('status') or []) + [
                    make_status_entry(status, CONSOLIDATED_DESCRIPTION, now)
                ]
            order.append_status(status, CONSOLIDATED_DESCRIPTION, now)

            product_ids = [product['product_id'] for product in order.products]
            tracking_info = dict(order.tracking_info or {})
            product_trackings = []
            inbound = []
            for entry in tracking_info.get('product_trackings') or []:
                if entry.get('product_id') in product_ids and not entry.get('consolidated_tracking_number'):
                    entry = dict(entry, consolidated_tracking_number=shipment_number)
                    if entry.get('tracking_number') not in inbound:
                        inbound.append(entry['tracking_number'])
                product_trackings.append(entry)
            tracking_info['product_trackings'] = product_trackings
            order.tracking_info = tracking_info

            order.touch(now)
            order.save(update_fields=['order_details', 'status_history', 'current_status',
                                      'tracking_info', 'updated_at'])

            shipment = TrackingNumber.objects.create(
                tracking_number=shipment_number,
                carrier=carrier,
                products=[
                    {'product_id': product_id, 'order_id': order_id, 'status': status}
                    for product_id in product_ids
                ],
                orders=[order_id],
                is_consolidated=True,
                consolidated_from=inbound,
                created_at=now,
            )

            for mirror in Product.objects.select_for_update().filter(product_id__in=product_ids):
                mirror.add_order(order_id)
                mirror.mark_consolidated(inbound, shipment_number)
                mirror.add_tracking(shipment_number, carrier, status)
                mirror.save()

            logger.info(
                f"Order {order_id} consolidated: {len(product_ids)} products into "
                f"{carrier} {shipment_number} (superseding {len(inbound)} inbound shipments)"
            )
            return shipment

    @staticmethod
    def prepare_products(order_id: str, tracking_number: Optional[str], registry: StatusRegistry,
                         carrier: str = None) -> Order:
        """
        Prepare a consolidated order for the local carrier.

        Overwrites any previous order-level tracking.

        Args:
            order_id: Commerce platform order id
            tracking_number: Local carrier tracking number
            registry: Loaded status registry
            carrier: Carrier code, defaults to DEFAULT_CARRIER

        Returns:
            Updated Order instance

        Raises:
            ValidationException: If the tracking number is missing or the carrier unknown
            PreconditionFailedException: If no product has been consolidated
            NotFoundException: If the order does not exist
        """
        tracking_number = (tracking_number or '').strip()
        if not tracking_number:
            raise ValidationException(
                "A tracking number is required to prepare an order",
                {'trackingNumber': ['This field is required']}
            )
        carrier = carrier or settings.DEFAULT_CARRIER
        carrier_name = resolve_carrier(carrier).get('name', carrier)
        status = OrderTrackStatus.PREPARED.value
        registry.validate(StatusKind.ORDER, status)

        with transaction.atomic():
            order = get_order_for_update(order_id)

            consolidated = any(
                product_has_reached(product, ProductStatus.CONSOLIDATED) for product in order.products
            )
            if not consolidated:
                raise PreconditionFailedException(
                    f"Order {order_id} has no consolidated products",
                    condition="products_consolidated",
                    details={"required_status": ProductStatus.CONSOLIDATED.value},
                )

            now = timezone.now()
            order.fulfillment_status = dict(order.fulfillment_status or {}, status=FulfillmentStatus.FULFILLED.value)
            order.append_status(status, PREPARED_DESCRIPTION, now)
            tracking_info = dict(order.tracking_info or {})
            tracking_info['order_tracking'] = {'carrier': carrier_name, 'tracking_number': tracking_number}
            order.tracking_info = tracking_info
            order.touch(now)
            order.save(update_fields=['fulfillment_status', 'status_history', 'current_status',
                                      'tracking_info', 'updated_at'])

            logger.info(f"Order {order_id} prepared with {carrier_name} {tracking_number}")
            return order
