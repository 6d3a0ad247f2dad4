"""
Order and registry exceptions.

Exception Hierarchy:
    NotFoundError
    └── OrderNotFoundError - Order lookup failures
    ValidationError
    ├── OrderNotActionableError - Order lacks fields its action needs
    └── MissingRegistryDomainIdError - Renewal without a registry domain id
    ConflictError
    └── OrderCancelledError - Provisioning requested for a cancelled order
    ExternalServiceError
    └── RegistryError - Base for all registry (Rdash) failures
        ├── TransientProviderError - Safe to retry later
        │   ├── RegistryTimeoutError - Request timed out
        │   └── RegistryUnavailableError - Connection error, 5xx, 429
        └── TerminalProviderError - Registry rejected the request

Usage:
    from orders.exceptions import RegistryError, TerminalProviderError

    try:
        result = client.renew_domain(domain_id, period=1)
    except RegistryError as e:
        order.fail_provisioning(e.message)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import (
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Order Exceptions
# =============================================================================


class OrderNotFoundError(NotFoundError):
    default_error_code: str = "ORDER_NOT_FOUND"


class OrderNotActionableError(ValidationError):
    """
    Raised when an order is missing data required by its action.

    Example:
        raise OrderNotActionableError(
            "Transfer requires an auth code",
            details={"order_id": order.pk, "missing": ["auth_code"]},
        )
    """

    default_error_code: str = "ORDER_NOT_ACTIONABLE"


class MissingRegistryDomainIdError(ValidationError):
    """
    Raised when a renewal has no registry domain id.

    Renewals are addressed by the registry's numeric id; a domain name
    alone cannot be renewed.
    """

    default_error_code: str = "MISSING_REGISTRY_DOMAIN_ID"


class OrderCancelledError(ConflictError):
    default_error_code: str = "ORDER_CANCELLED"


# =============================================================================
# Registry Exceptions
# =============================================================================


class RegistryError(ExternalServiceError):
    """
    Base exception for registry provider failures.

    Attributes:
        status_code: HTTP status returned by the registry, if any
        is_retryable: Whether repeating the same request may succeed
    """

    default_error_code: str = "REGISTRY_ERROR"
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


class TransientProviderError(RegistryError):
    default_error_code: str = "REGISTRY_TRANSIENT_ERROR"
    is_retryable: bool = True


class RegistryTimeoutError(TransientProviderError):
    default_error_code: str = "REGISTRY_TIMEOUT"


class RegistryUnavailableError(TransientProviderError):
    default_error_code: str = "REGISTRY_UNAVAILABLE"


class TerminalProviderError(RegistryError):
    """
    Raised when the registry rejects a request outright.

    Covers 4xx responses and 2xx bodies carrying ``success: false``.
    Retrying the identical request will not help.
    """

    default_error_code: str = "REGISTRY_REJECTED"
