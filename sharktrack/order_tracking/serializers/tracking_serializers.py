"""
Shipment tracking serializers for Order Tracking.
"""

from rest_framework import serializers


class TrackerCreateSerializer(serializers.Serializer):
    """Request body for registering a tracker with the tracking provider."""

    trackingNumber = serializers.CharField(source='tracking_number', max_length=100)
    courierCode = serializers.CharField(source='courier_code', max_length=50, required=False, allow_blank=True)
    orderId = serializers.CharField(source='order_id', max_length=64, required=False, allow_blank=True)


class TrackerResultsQuerySerializer(serializers.Serializer):
    trackerId = serializers.CharField(source='tracker_id', max_length=100)
