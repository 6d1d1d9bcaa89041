"""
Filters for Order Tracking list endpoints.
"""

import django_filters

from .models import Order, OrderType, PaymentStatus


class OrderFilter(django_filters.FilterSet):
    """Filter orders by current status code, payment status and order type."""

    status = django_filters.CharFilter(field_name='current_status__status')
    payment_status = django_filters.ChoiceFilter(choices=PaymentStatus.choices)
    order_type = django_filters.ChoiceFilter(choices=OrderType.choices)
    location = django_filters.CharFilter()

    class Meta:
        model = Order
        fields = ['status', 'payment_status', 'order_type', 'location']
