"""
Workflow rules for Order Tracking.

Products move along the product track up to consolidation; the order then
moves along the order track one step at a time.
"""

from typing import Dict, List, Optional

from ..exceptions import InvalidTransitionException
from ..models import ProductStatus, OrderTrackStatus

PRODUCT_TRACK = [
    ProductStatus.INTAKE,
    ProductStatus.AWAITING_TRACKING,
    ProductStatus.IN_TRANSIT,
    ProductStatus.ARRIVED_AT_HUB,
    ProductStatus.PROCESSED_AT_HUB,
    ProductStatus.AT_DISTRIBUTION_CENTER,
    ProductStatus.EN_ROUTE_TO_BRANCH,
    ProductStatus.RECEIVED_BY_OPERATOR,
    ProductStatus.CONSOLIDATED,
]


def _forward_moves(track: List[str], last_manual: str) -> Dict[str, List[str]]:
    stop = track.index(last_manual)
    transitions = {}
    for index, status in enumerate(track[:stop]):
        transitions[status] = list(track[index + 1:stop + 1])
    return transitions


class ProductWorkflow:
    """Workflow rules for product status transitions."""

    # Any forward move up to arrival at the operator's facility
    ALLOWED_TRANSITIONS = {
        **_forward_moves(PRODUCT_TRACK, ProductStatus.RECEIVED_BY_OPERATOR),
        ProductStatus.RECEIVED_BY_OPERATOR: [ProductStatus.CONSOLIDATED],
        ProductStatus.CONSOLIDATED: [],  # Final state
    }

    # Statuses only the consolidation protocol may set
    PROTOCOL_ONLY = [ProductStatus.CONSOLIDATED]

    @classmethod
    def validate_transition(cls, current_status: Optional[str], new_status: str) -> None:
        """
        Validate a product status transition.

        Args:
            current_status: Status of the product's last history entry
            new_status: Status to transition to

        Raises:
            InvalidTransitionException: If the transition is not allowed
        """
        allowed = cls.ALLOWED_TRANSITIONS.get(current_status, [])
        if new_status not in allowed or new_status in cls.PROTOCOL_ONLY:
            raise InvalidTransitionException(
                current_status=current_status,
                attempted_status=new_status,
                entity_type="Product"
            )

    @classmethod
    def can_transition_to(cls, current_status: Optional[str], new_status: str) -> bool:
        try:
            cls.validate_transition(current_status, new_status)
            return True
        except InvalidTransitionException:
            return False

    @classmethod
    def next_statuses(cls, current_status: Optional[str]) -> List[str]:
        """Statuses an operator may move to from current_status."""
        return [
            status for status in cls.ALLOWED_TRANSITIONS.get(current_status, [])
            if cls.can_transition_to(current_status, status)
        ]


class OrderWorkflow:
    """Workflow rules for order-level status transitions."""

    ALLOWED_TRANSITIONS = {
        ProductStatus.CONSOLIDATED: [OrderTrackStatus.PREPARED],
        OrderTrackStatus.PREPARED: [OrderTrackStatus.WITH_CARRIER],
        OrderTrackStatus.WITH_CARRIER: [OrderTrackStatus.READY_FOR_DELIVERY],
        OrderTrackStatus.READY_FOR_DELIVERY: [OrderTrackStatus.DELIVERED],
        OrderTrackStatus.DELIVERED: [],  # Final state
    }

    PROTOCOL_ONLY = [ProductStatus.CONSOLIDATED, OrderTrackStatus.PREPARED]

    @classmethod
    def validate_transition(cls, current_status: Optional[str], new_status: str) -> None:
        """
        Validate an order status transition.

        Args:
            current_status: Order's current status
            new_status: Status to transition to

        Raises:
            InvalidTransitionException: If the transition is not allowed
        """
        allowed = cls.ALLOWED_TRANSITIONS.get(current_status, [])
        if new_status not in allowed or new_status in cls.PROTOCOL_ONLY:
            raise InvalidTransitionException(
                current_status=current_status,
                attempted_status=new_status,
                entity_type="Order"
            )

    @classmethod
    def can_transition_to(cls, current_status: Optional[str], new_status: str) -> bool:
        try:
            cls.validate_transition(current_status, new_status)
            return True
        except InvalidTransitionException:
            return False

    @classmethod
    def next_statuses(cls, current_status: Optional[str]) -> List[str]:
        """Statuses an operator may move to from current_status."""
        return [
            status for status in cls.ALLOWED_TRANSITIONS.get(current_status, [])
            if cls.can_transition_to(current_status, status)
        ]


def validate_product_workflow(current_status: Optional[str], new_status: str) -> None:
    """
    Validate a manual product transition.

    Raises:
        InvalidTransitionException: If transition is not allowed
    """
    ProductWorkflow.validate_transition(current_status, new_status)


def validate_order_workflow(current_status: Optional[str], new_status: str) -> None:
    """
    Validate a manual order transition.

    Raises:
        InvalidTransitionException: If transition is not allowed
    """
    OrderWorkflow.validate_transition(current_status, new_status)
