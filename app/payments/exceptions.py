"""
Payment-specific exceptions for gateway callbacks and status queries.

Exception Hierarchy:
    AuthenticationError
    └── InvalidSignatureError - Callback digest does not match
    ValidationError
    ├── CallbackValidationError - Callback missing required fields
    └── AmountMismatchError - Signal amount differs from the Transaction
    NotFoundError
    └── TransactionNotFoundError - Unknown merchantOrderId
    ExternalServiceError
    └── GatewayError - Base for all gateway (Duitku) failures
        ├── GatewayTimeoutError - Request timeout (transient, retry)
        ├── GatewayUnavailableError - Connection error, 5xx (transient, retry)
        └── GatewayResponseError - Malformed or rejected response (permanent)

Usage:
    from payments.exceptions import GatewayError, InvalidSignatureError

    try:
        result = client.check_status(merchant_order_id)
    except GatewayError as e:
        if e.is_retryable:
            ...  # next poll will try again
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import (
    AuthenticationError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Callback Exceptions
# =============================================================================


class InvalidSignatureError(AuthenticationError):
    """
    Raised when a callback signature does not verify.

    The request is rejected before any store is read or written.
    """

    default_error_code: str = "INVALID_SIGNATURE"


class CallbackValidationError(ValidationError):
    """
    Raised when a callback body is unparseable or incomplete.

    Example:
        raise CallbackValidationError(
            "Missing required callback fields",
            details={"missing": ["signature"]},
        )
    """

    default_error_code: str = "INVALID_CALLBACK"


class AmountMismatchError(ValidationError):
    default_error_code: str = "AMOUNT_MISMATCH"


class TransactionNotFoundError(NotFoundError):
    default_error_code: str = "TRANSACTION_NOT_FOUND"


# =============================================================================
# Gateway Exceptions
# =============================================================================


class GatewayError(ExternalServiceError):
    """
    Base exception for payment gateway failures.

    Use is_retryable to determine retry behavior:
    - True: Transient error, the next poller pass will try again
    - False: Permanent error, needs investigation
    """

    default_error_code: str = "GATEWAY_ERROR"
    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, error_code=error_code, details=details)
        self.status_code = status_code


class GatewayTimeoutError(GatewayError):
    default_error_code: str = "GATEWAY_TIMEOUT"
    is_retryable: bool = True


class GatewayUnavailableError(GatewayError):
    default_error_code: str = "GATEWAY_UNAVAILABLE"
    is_retryable: bool = True


class GatewayResponseError(GatewayError):
    default_error_code: str = "GATEWAY_BAD_RESPONSE"
