"""
Consolidation, preparation and sync views for Order Tracking.
"""

from rest_framework.views import APIView

from ..adapters.order_source import get_order_source
from ..exceptions import BusinessException
from ..serializers.order_serializers import ConsolidateSerializer, PrepareSerializer, OrderDetailSerializer
from ..services import ConsolidationService, OrderSyncService, calendar_month_window
from ..services.status_registry import get_registry
from .responses import success_response, error_response, validate_body


class ConsolidateProductsView(APIView):
    """Consolidate every product of an order into one shipment."""

    def post(self, request, order_id):
        try:
            data = validate_body(ConsolidateSerializer, request.data)
            shipment = ConsolidationService.consolidate_products(
                order_id, data['carrier'], data.get('tracking_number'), get_registry()
            )
            return success_response(
                {
                    'tracking_number': shipment.tracking_number,
                    'carrier': shipment.carrier,
                    'is_consolidated': shipment.is_consolidated,
                    'consolidated_from': shipment.consolidated_from,
                    'products': shipment.products,
                },
                message='Products consolidated',
                orderId=order_id,
            )
        except BusinessException as e:
            return error_response(e)


class PrepareProductsView(APIView):
    """Prepare a consolidated order for the local carrier."""

    def post(self, request, order_id):
        try:
            data = validate_body(PrepareSerializer, request.data)
            registry = get_registry()
            order = ConsolidationService.prepare_products(
                order_id, data.get('tracking_number'), registry, carrier=data.get('carrier') or None
            )
            return success_response(
                OrderDetailSerializer(order, context={'registry': registry}).data,
                message='Order prepared',
                orderId=order_id,
                trackingNumber=order.tracking_info['order_tracking']['tracking_number'],
            )
        except BusinessException as e:
            return error_response(e)


class SyncOrdersView(APIView):
    """Synchronize orders from the previous month through the end of this one."""

    def post(self, request):
        try:
            created_at_min, created_at_max = calendar_month_window()
            summary = OrderSyncService.sync_window(
                created_at_min, created_at_max, get_order_source(), get_registry()
            )
            return success_response(
                message=f"Sync completed, {summary.processed} orders processed",
                processed=summary.processed,
                summary=summary.as_dict(),
            )
        except BusinessException as e:
            return error_response(e)
