"""
Order views for Order Tracking.
"""

from rest_framework import viewsets, filters, status
from rest_framework.decorators import action
from django_filters.rest_framework import DjangoFilterBackend

from ..exceptions import BusinessException, NotFoundException
from ..filters import OrderFilter
from ..models import Order
from ..pagination import OrdersPagination
from ..serializers.order_serializers import (
    OrderListSerializer, OrderDetailSerializer, StatusUpdateSerializer,
    ProductTrackingSerializer, PurchaseDetailsSerializer,
)
from ..services import StatusService, ProductService
from ..services.status_registry import get_registry, peek_registry
from .responses import success_response, error_response, validate_body

PRODUCT_ACTION_PATH = r'products/(?P<product_id>[^/]+)'


class OrderViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for imported orders.

    Orders are addressed by their commerce platform id. Listing is paginated
    20 per page; operator moves are exposed as actions.
    """

    queryset = Order.objects.all()
    lookup_field = 'shopify_order_id'
    lookup_url_kwarg = 'order_id'
    lookup_value_regex = '[^/]+'
    pagination_class = OrdersPagination
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = OrderFilter
    search_fields = ['shopify_order_id', 'shopify_order_number']
    ordering_fields = ['created_at', 'updated_at', 'shopify_order_number']
    ordering = ['-created_at']

    def get_serializer_class(self):
        """Return appropriate serializer based on action."""
        if self.action == 'list':
            return OrderListSerializer
        return OrderDetailSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['registry'] = peek_registry()
        return context

    def retrieve(self, request, order_id=None):
        """Get one order with customer facing status labels."""
        order = Order.objects.filter(shopify_order_id=order_id).first()
        if order is None:
            return error_response(NotFoundException("Order", order_id))
        return success_response(self.get_serializer(order).data)

    def _order_response(self, order, http_status=status.HTTP_200_OK):
        serializer = OrderDetailSerializer(order, context=self.get_serializer_context())
        return success_response(serializer.data, http_status=http_status)

    @action(detail=True, methods=['post'], url_path='status')
    def advance_status(self, request, order_id=None):
        """Move the order one step along the order track."""
        try:
            data = validate_body(StatusUpdateSerializer, request.data)
            order = StatusService.advance_order_status(
                order_id, data['status'], get_registry(), data.get('description', '')
            )
            return self._order_response(order)
        except BusinessException as e:
            return error_response(e)

    @action(detail=True, methods=['post'], url_path=f'{PRODUCT_ACTION_PATH}/status')
    def advance_product_status(self, request, order_id=None, product_id=None):
        """Move one product forward on the product track."""
        try:
            data = validate_body(StatusUpdateSerializer, request.data)
            order = StatusService.advance_product_status(
                order_id, product_id, data['status'], get_registry(), data.get('description', '')
            )
            return self._order_response(order)
        except BusinessException as e:
            return error_response(e)

    @action(detail=True, methods=['post'], url_path=f'{PRODUCT_ACTION_PATH}/tracking')
    def attach_product_tracking(self, request, order_id=None, product_id=None):
        """Record the supplier shipment a product travels in."""
        try:
            data = validate_body(ProductTrackingSerializer, request.data)
            order = StatusService.attach_product_tracking(
                order_id, product_id, data['carrier'], data['tracking_number'], get_registry()
            )
            return self._order_response(order)
        except BusinessException as e:
            return error_response(e)

    @action(detail=True, methods=['post'], url_path=f'{PRODUCT_ACTION_PATH}/purchase')
    def update_purchase(self, request, order_id=None, product_id=None):
        """Set a product's purchase type, supplier PO and provider."""
        try:
            data = validate_body(PurchaseDetailsSerializer, request.data)
            order = ProductService.update_purchase_details(
                order_id, product_id, data['purchase_type'],
                supplier_po=data.get('supplier_po') or None,
                provider=data.get('provider') or None,
            )
            return self._order_response(order)
        except BusinessException as e:
            return error_response(e)
