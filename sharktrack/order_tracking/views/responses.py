"""
Response helpers shared by the Order Tracking views.
"""

import logging

from rest_framework import status
from rest_framework.response import Response

from ..exceptions import BusinessException, ValidationException, format_field_errors

logger = logging.getLogger(__name__)


def success_response(data=None, http_status=status.HTTP_200_OK, **extra) -> Response:
    body = {'success': True}
    body.update(extra)
    if data is not None:
        body['data'] = data
    return Response(body, status=http_status)


def error_response(exc: BusinessException) -> Response:
    """Render a business exception with its own HTTP status."""
    if exc.http_status >= 500:
        logger.error(f"{exc.code}: {exc.message}")
    else:
        logger.info(f"{exc.code}: {exc.message}")
    return Response({
        'success': False,
        'error': exc.to_dict(),
    }, status=exc.http_status)


def validate_body(serializer_class, data, **kwargs):
    """
    Validate a request body.

    Raises:
        ValidationException: Carrying the serializer's field errors
    """
    serializer = serializer_class(data=data, **kwargs)
    if not serializer.is_valid():
        errors = dict(serializer.errors)
        raise ValidationException("; ".join(format_field_errors(errors)), errors)
    return serializer.validated_data
