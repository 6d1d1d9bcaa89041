"""
Status registry and health views for Order Tracking.
"""

from django.http import JsonResponse
from rest_framework.views import APIView

from ..exceptions import BusinessException
from ..services.status_registry import get_registry, reload_registry
from .responses import success_response, error_response


def registry_payload(registry):
    return {
        'statuses': registry.as_dict(),
        'loaded_at': registry.loaded_at,
    }


class StatusListView(APIView):
    """Status codes and customer labels currently loaded, per kind."""

    def get(self, request):
        try:
            return success_response(registry_payload(get_registry()))
        except BusinessException as e:
            return error_response(e)


class StatusReloadView(APIView):
    """Swap in a freshly loaded registry."""

    def post(self, request):
        try:
            return success_response(registry_payload(reload_registry()), message='Status registry reloaded')
        except BusinessException as e:
            return error_response(e)


def health(request):
    """Liveness probe."""
    return JsonResponse({'status': 'ok', 'message': 'Server is up and healthy'})
