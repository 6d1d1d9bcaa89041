"""
Shipment tracking provider views for Order Tracking.
"""

from rest_framework import status
from rest_framework.views import APIView

from ..adapters.shipment_tracking import get_tracking_client
from ..exceptions import BusinessException
from ..serializers.tracking_serializers import TrackerCreateSerializer, TrackerResultsQuerySerializer
from .responses import success_response, error_response, validate_body


class TrackerCreateView(APIView):
    """Register a tracking number with the tracking provider."""

    def post(self, request):
        try:
            data = validate_body(TrackerCreateSerializer, request.data)
            tracker = get_tracking_client().create_tracker(
                data['tracking_number'], data.get('courier_code') or None
            )
            return success_response(
                tracker,
                http_status=status.HTTP_201_CREATED,
                message='Tracker created',
                trackerId=tracker.get('trackerId'),
            )
        except BusinessException as e:
            return error_response(e)


class TrackerResultsView(APIView):
    """Tracking events for a registered tracker."""

    def get(self, request):
        try:
            data = validate_body(TrackerResultsQuerySerializer, request.query_params)
            return success_response(get_tracking_client().get_results(data['tracker_id']))
        except BusinessException as e:
            return error_response(e)
