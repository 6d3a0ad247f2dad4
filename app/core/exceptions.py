"""
Base exception classes for application-wide error handling.

Every domain error raised by the payments, orders and audit apps derives
from BaseApplicationError so that boundaries (views, Celery tasks) can
convert them into a uniform response or log record.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── AuthenticationError - Caller could not prove who it is (bad signature)
    ├── ValidationError - Malformed input or missing required fields
    ├── NotFoundError - Resource not found
    ├── ConflictError - Operation not allowed in the current state
    └── ExternalServiceError - Third-party service failures

Usage:
    from core.exceptions import ValidationError, NotFoundError

    raise ValidationError("merchantOrderId is required")

    raise NotFoundError(
        f"Order {order_id} not found",
        error_code="ORDER_NOT_FOUND",
        details={"order_id": order_id},
    )

    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=e.http_status)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context
        http_status: Status code used when the error reaches an API view
    """

    default_error_code: str = "APPLICATION_ERROR"
    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "success": False,
                "error": "Order 12 not found",
                "error_code": "ORDER_NOT_FOUND",
                "details": {"order_id": 12}
            }
        """
        result: dict[str, Any] = {
            "success": False,
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class AuthenticationError(BaseApplicationError):
    """
    Raised when an inbound request cannot be authenticated.

    Used for server-to-server calls that carry their own proof of origin,
    e.g. a payment gateway callback with a shared-secret digest. Raised
    before any state is touched.
    """

    default_error_code: str = "AUTHENTICATION_FAILED"
    http_status: int = 401


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for:
    - Malformed or incomplete inbound payloads
    - Records missing fields required by an operation
    """

    default_error_code: str = "VALIDATION_ERROR"
    http_status: int = 400


class NotFoundError(BaseApplicationError):
    """Raised when a requested resource is not found."""

    default_error_code: str = "NOT_FOUND"
    http_status: int = 404


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    Example:
        if order.status == OrderStatus.CANCELLED:
            raise ConflictError(
                "Cannot provision a cancelled order",
                error_code="ORDER_CANCELLED",
                details={"order_id": order.pk},
            )
    """

    default_error_code: str = "CONFLICT"
    http_status: int = 409


class ExternalServiceError(BaseApplicationError):
    """
    Raised when an external service call fails.

    Subclasses set ``is_retryable`` to distinguish transient failures
    (timeouts, connection errors, 5xx) from terminal rejections.

    Note:
        Log the original error for debugging but don't expose
        internal details to customers.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
    http_status: int = 502
    is_retryable: bool = False
