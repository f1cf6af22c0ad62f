"""
PickupDesk - Custom Exception Hierarchy

Provides structured, typed exceptions with error codes for consistent
error handling across the application.

Usage:
    from app.exceptions import ShopifyNotFoundError

    raise ShopifyNotFoundError("Order", order_id)
"""
from typing import Any, Dict, List, Optional


class PickupDeskException(Exception):
    """
    Base exception for all PickupDesk errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code (e.g., "NOT_FOUND", "INTEGRATION_ERROR")
        status_code: HTTP status code to return
        details: Additional context for debugging
    """

    error_code: str = "PICKUPDESK_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# ===================
# 401 Unauthorized Errors
# ===================


class AuthenticationError(PickupDeskException):
    """Raised when an operator route is called without a valid API key."""

    error_code = "AUTHENTICATION_ERROR"
    status_code = 401

    def __init__(
        self,
        message: str = "Authentication required",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


# ===================
# 502 Integration Errors
# ===================


class IntegrationError(PickupDeskException):
    """Raised when an external service integration fails."""

    error_code = "INTEGRATION_ERROR"
    status_code = 502

    def __init__(
        self,
        service: str,
        message: str = "External service error",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        details["service"] = service
        super().__init__(f"{service}: {message}", details=details)


class ShopifyError(IntegrationError):
    """Base class for failures talking to the Shopify Admin API."""

    error_code = "SHOPIFY_ERROR"

    def __init__(
        self,
        message: str = "Shopify request failed",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__("Shopify", message, details=details)


class ShopifyNotFoundError(ShopifyError):
    """Raised when Shopify answers 404 for a resource."""

    error_code = "SHOPIFY_NOT_FOUND"
    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Any = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        details["resource"] = resource
        if resource_id is not None:
            details["resource_id"] = str(resource_id)
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(message, details=details)


class ShopifyTransportError(ShopifyError):
    """
    Raised on timeouts, connection failures, 5xx answers and unreadable bodies.

    For a mutation this is ambiguous: Shopify may have applied it anyway.
    """

    error_code = "SHOPIFY_TRANSPORT_ERROR"

    def __init__(
        self,
        message: str = "Shopify unreachable",
        *,
        timed_out: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.timed_out = timed_out
        details = details or {}
        if timed_out:
            details["timed_out"] = True
        super().__init__(message, details=details)


class ShopifyRejectedError(ShopifyError):
    """Raised when Shopify refuses a request with a 4xx answer."""

    error_code = "SHOPIFY_REJECTED"

    def __init__(
        self,
        upstream_status: int,
        errors: Any = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.upstream_status = upstream_status
        self.errors = errors
        details = details or {}
        details["upstream_status"] = upstream_status
        if errors is not None:
            details["errors"] = errors
        super().__init__(f"request rejected with HTTP {upstream_status}", details=details)

    def error_messages(self) -> List[str]:
        """Flatten Shopify's ``errors`` payload (string, list or field->messages dict)."""
        errors = self.errors
        if errors is None:
            return []
        if isinstance(errors, str):
            return [errors]
        if isinstance(errors, list):
            return [str(e) for e in errors]
        if isinstance(errors, dict):
            messages = []
            for field, value in errors.items():
                values = value if isinstance(value, list) else [value]
                messages.extend(f"{field}: {v}" for v in values)
            return messages
        return [str(errors)]

    def error_fields(self) -> List[str]:
        if isinstance(self.errors, dict):
            return [str(field) for field in self.errors]
        return []
