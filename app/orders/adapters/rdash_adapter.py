"""
Rdash registry API client for domain provisioning.

This module provides the RdashClient class which encapsulates the three
registry calls the fulfillment orchestrator needs: register, transfer
and renew. All calls go through a single request helper that applies
HTTP Basic auth, a bounded timeout and error translation.

Features:
- Configurable timeout on every call (timeouts are transient)
- Translation of transport and HTTP failures to registry exceptions
- Structured logging with timing metrics

Configuration (via settings):
- RDASH_BASE_URL: Registry API root (e.g. https://api.rdash.id/v1)
- RDASH_RESELLER_ID: Basic auth user
- RDASH_API_KEY: Basic auth password
- RDASH_API_TIMEOUT_SECONDS: Request timeout (default: 30)

Usage:
    from orders.adapters import RdashClient

    client = RdashClient.from_settings()
    result = client.register_domain(
        name="example.id",
        customer_id=101,
        period=1,
        whois_protection=True,
    )
    result.data["id"]
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

import requests
from django.conf import settings

from orders.exceptions import (
    RegistryTimeoutError,
    RegistryUnavailableError,
    TerminalProviderError,
)

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class RegistryResult:
    """
    Successful registry response.

    Attributes:
        data: The "data" object of the response (domain record)
        message: Registry message, if any
        raw: Full decoded response body
    """

    data: dict[str, Any] = field(default_factory=dict)
    message: str = ""
    raw: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Client
# =============================================================================


class RdashClient:
    """HTTP client for the Rdash reseller API."""

    def __init__(
        self,
        base_url: str,
        reseller_id: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.reseller_id = reseller_id
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls) -> RdashClient:
        return cls(
            base_url=settings.RDASH_BASE_URL,
            reseller_id=settings.RDASH_RESELLER_ID,
            api_key=settings.RDASH_API_KEY,
            timeout=getattr(
                settings, "RDASH_API_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS
            ),
        )

    def close(self) -> None:
        """Release the pooled HTTP connections."""
        self.session.close()

    def __enter__(self) -> RdashClient:
        return self

    def __exit__(self, *exc_info) -> bool:
        self.close()
        return False

    # =========================================================================
    # Provisioning Operations
    # =========================================================================

    def register_domain(
        self,
        *,
        name: str,
        customer_id: int,
        period: int = 1,
        whois_protection: bool = False,
    ) -> RegistryResult:
        form = {
            "name": name,
            "customer_id": str(customer_id),
            "period": str(period),
        }
        if whois_protection:
            form["buy_whois_protection"] = "true"
        return self._post("/domains", form, operation="register")

    def transfer_domain(
        self,
        *,
        domain: str,
        customer_id: int,
        auth_code: str,
        period: int = 1,
        whois_protection: bool = False,
    ) -> RegistryResult:
        form = {
            "domain": domain,
            "customer_id": str(customer_id),
            "auth_code": auth_code,
        }
        if period:
            form["period"] = str(period)
        if whois_protection:
            form["whois_protection"] = "1"
        return self._post("/domains/transfer", form, operation="transfer")

    def renew_domain(
        self,
        domain_id: int,
        *,
        period: int = 1,
        current_date: date | None = None,
        whois_protection: bool = False,
    ) -> RegistryResult:
        """
        Renew a domain by registry id.

        current_date is the domain's current expiry date as the registry
        knows it; today's date is sent when none is given.
        """
        form = {
            "period": str(period),
            "current_date": (current_date or date.today()).isoformat(),
        }
        if whois_protection:
            form["buy_whois_protection"] = "true"
        return self._post(f"/domains/{domain_id}/renew", form, operation="renew")

    # =========================================================================
    # Transport
    # =========================================================================

    def _post(self, path: str, form: dict[str, str], operation: str) -> RegistryResult:
        url = f"{self.base_url}{path}"
        started = time.monotonic()
        log_context = {"operation": operation, "path": path}

        try:
            response = self.session.post(
                url,
                data=form,
                auth=(self.reseller_id, self.api_key),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            logger.warning(
                "Registry request timed out",
                extra={**log_context, "timeout": self.timeout},
            )
            raise RegistryTimeoutError(
                f"Registry request timed out after {self.timeout}s",
                details={"operation": operation},
            ) from e
        except requests.RequestException as e:
            logger.warning(
                "Registry request failed",
                extra={**log_context, "error": str(e)},
            )
            raise RegistryUnavailableError(
                f"Registry unreachable: {e}",
                details={"operation": operation},
            ) from e

        duration_ms = int((time.monotonic() - started) * 1000)
        body = self._decode(response)
        message = str(body.get("message") or "")

        logger.info(
            "Registry responded",
            extra={
                **log_context,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        if response.status_code >= 500 or response.status_code == 429:
            raise RegistryUnavailableError(
                message or f"Registry API error: HTTP {response.status_code}",
                status_code=response.status_code,
                details={"operation": operation},
            )

        if not response.ok or body.get("success") is False:
            raise TerminalProviderError(
                message or f"Registry API error: HTTP {response.status_code}",
                status_code=response.status_code,
                details={"operation": operation},
            )

        data = body.get("data")
        return RegistryResult(
            data=data if isinstance(data, dict) else {},
            message=message,
            raw=body,
        )

    @staticmethod
    def _decode(response: requests.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {"message": response.text[:500]}
        return body if isinstance(body, dict) else {"data": body}
