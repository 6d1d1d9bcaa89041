"""
URL configuration for the sharktrack project.
"""
from django.contrib import admin
from django.urls import path, include
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from django.http import JsonResponse

from order_tracking.views import health


@csrf_exempt
@require_http_methods(["GET"])
def api_root(request):
    """API root view with available endpoints."""
    return JsonResponse({
        'message': 'Sharktrack Order Tracking API',
        'version': '1.0.0',
        'endpoints': {
            'orders': '/api/orders',
            'sync_orders': '/api/sync-orders',
            'consolidate_products': '/api/consolidate-products/<order_id>',
            'prepare_products': '/api/prepare-products/<order_id>',
            'statuses': '/api/statuses',
            'supplier_purchase_orders': '/api/supplier-purchase-orders',
            'tracking': {
                'create': '/api/tracking/create',
                'results': '/api/tracking/results?trackerId=<id>',
            },
            'health': '/health',
        }
    })


urlpatterns = [
    path("admin/", admin.site.urls),
    path("health", health, name="health"),

    # API endpoints
    path('api', api_root, name='api-root'),
    path('api/', include('order_tracking.urls')),
]
