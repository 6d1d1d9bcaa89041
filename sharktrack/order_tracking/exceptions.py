"""
Custom exceptions for the Order Tracking module.
"""

from typing import Dict, Any, List


class BusinessException(Exception):
    """Base exception for business logic errors."""

    http_status = 400

    def __init__(self, message: str, code: str = "BUSINESS_ERROR", details: Dict[str, Any] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'message': self.message,
            'details': self.details,
        }


class ValidationException(BusinessException):
    """Raised when data validation fails."""

    def __init__(self, message: str, field_errors: Dict[str, Any] = None):
        super().__init__(message, "VALIDATION_ERROR", field_errors or {})


class PreconditionFailedException(BusinessException):
    """Raised when a state-machine gate is not met."""

    http_status = 409

    def __init__(self, message: str, condition: str, details: Dict[str, Any] = None, code: str = "PRECONDITION_FAILED"):
        payload = {'condition': condition}
        payload.update(details or {})
        super().__init__(message, code, payload)
        self.condition = condition


class InvalidTransitionException(PreconditionFailedException):
    """Raised when attempting an invalid workflow transition."""

    def __init__(self, current_status: str, attempted_status: str, entity_type: str = "order"):
        message = f"Invalid transition for {entity_type}: cannot move from {current_status} to {attempted_status}"
        super().__init__(
            message,
            condition="allowed_transition",
            details={
                "current_status": current_status,
                "attempted_status": attempted_status,
                "entity_type": entity_type
            },
            code="INVALID_TRANSITION",
        )


class ConfigurationException(BusinessException):
    """Raised when the status registry is missing or lacks required codes."""

    http_status = 503

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message, "CONFIGURATION_ERROR", details)


class NotFoundException(BusinessException):
    """Raised when a referenced order, product or record does not exist."""

    http_status = 404

    def __init__(self, entity_type: str, identifier: str):
        message = f"{entity_type} {identifier} not found"
        super().__init__(message, "NOT_FOUND", {
            "entity_type": entity_type,
            "identifier": identifier
        })


class ConflictIgnoredException(BusinessException):
    """
    Raised when reconciliation finds the incoming order identical to the stored one.

    Not an error: callers catch it to count already synchronized orders.
    """

    http_status = 200

    def __init__(self, order_id: str, comparison_version: int):
        super().__init__(
            f"Order {order_id} is already synchronized",
            "CONFLICT_IGNORED",
            {"order_id": order_id, "comparison_version": comparison_version}
        )
        self.order_id = order_id


class UpstreamException(BusinessException):
    """Raised when an external HTTP source fails."""

    http_status = 502
    category = "unknown"

    def __init__(self, message: str, status_code: int = None, url: str = None, body: str = ""):
        super().__init__(message, f"UPSTREAM_{self.category.upper()}", {
            "category": self.category,
            "status_code": status_code,
            "url": url,
            "body": body[:500] if body else "",
        })
        self.status_code = status_code
        self.url = url


class UpstreamAuthException(UpstreamException):
    """Credentials rejected by the upstream service (401/403)."""

    category = "auth"


class UpstreamRateLimitException(UpstreamException):
    """Upstream rate limit exceeded (429)."""

    category = "rate_limit"

    def __init__(self, message: str, status_code: int = None, url: str = None, body: str = "",
                 retry_after: float = None):
        super().__init__(message, status_code, url, body)
        self.retry_after = retry_after
        self.details["retry_after"] = retry_after


class UpstreamServerException(UpstreamException):
    """Upstream server error (5xx) or transport failure."""

    category = "server_error"


class UpstreamNotFoundException(UpstreamException):
    """Upstream resource not found (404)."""

    category = "not_found"


class UpstreamInvalidResponseException(UpstreamException):
    """Successful status with a body that is not a JSON object."""

    category = "invalid_response"


def format_field_errors(errors: Dict[str, Any]) -> List[str]:
    """Flatten a field error mapping into human readable lines."""
    lines = []
    for field, messages in errors.items():
        if isinstance(messages, (list, tuple)):
            lines.extend(f"{field}: {msg}" for msg in messages)
        else:
            lines.append(f"{field}: {messages}")
    return lines
