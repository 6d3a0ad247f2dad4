"""
Duitku gateway API client for transaction status queries.

The status poller uses DuitkuClient to ask the gateway about each
pending Transaction. Every call is signed, bounded by a timeout and
translated into either a StatusQueryResult or a GatewayError.

Configuration (via settings):
- DUITKU_BASE_URL: Merchant API root
- DUITKU_MERCHANT_CODE: Merchant code
- DUITKU_API_KEY: Merchant API key (signing secret)
- DUITKU_API_TIMEOUT_SECONDS: Request timeout (default: 15)

Usage:
    from payments.adapters import DuitkuClient

    client = DuitkuClient.from_settings()
    result = client.check_status("INV-20260401-0001")
    result.target_status()
"""

from __future__ import annotations

import logging
import time

import requests
from django.conf import settings

from payments.callbacks import StatusQueryResult
from payments.exceptions import (
    GatewayResponseError,
    GatewayTimeoutError,
    GatewayUnavailableError,
)
from payments.signatures import SignatureVerifier

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15


class DuitkuClient:
    """HTTP client for the Duitku merchant API."""

    def __init__(
        self,
        base_url: str,
        signer: SignatureVerifier,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.signer = signer
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls) -> DuitkuClient:
        return cls(
            base_url=settings.DUITKU_BASE_URL,
            signer=SignatureVerifier.from_settings(),
            timeout=getattr(
                settings, "DUITKU_API_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS
            ),
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> DuitkuClient:
        return self

    def __exit__(self, *exc_info) -> bool:
        self.close()
        return False

    def check_status(self, merchant_order_id: str) -> StatusQueryResult:
        """
        Query the gateway for the current status of a payment.

        Raises:
            GatewayTimeoutError: Request timed out (retryable)
            GatewayUnavailableError: Connection failure or 5xx (retryable)
            GatewayResponseError: Non-2xx or non-JSON response
        """
        url = f"{self.base_url}/transactionStatus"
        payload = {
            "merchantCode": self.signer.merchant_code,
            "merchantOrderId": merchant_order_id,
            "signature": self.signer.sign_status_query(merchant_order_id),
        }
        started = time.monotonic()

        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.Timeout as e:
            logger.warning(
                "Gateway status query timed out",
                extra={"merchant_order_id": merchant_order_id, "timeout": self.timeout},
            )
            raise GatewayTimeoutError(
                f"Gateway status query timed out after {self.timeout}s",
                details={"merchant_order_id": merchant_order_id},
            ) from e
        except requests.RequestException as e:
            logger.warning(
                "Gateway status query failed",
                extra={"merchant_order_id": merchant_order_id, "error": str(e)},
            )
            raise GatewayUnavailableError(
                f"Gateway unreachable: {e}",
                details={"merchant_order_id": merchant_order_id},
            ) from e

        duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            "Gateway status query completed",
            extra={
                "merchant_order_id": merchant_order_id,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        if response.status_code >= 500:
            raise GatewayUnavailableError(
                f"Duitku API error: {response.status_code}",
                status_code=response.status_code,
                details={"merchant_order_id": merchant_order_id},
            )
        if not response.ok:
            raise GatewayResponseError(
                f"Duitku API error: {response.status_code}",
                status_code=response.status_code,
                details={"merchant_order_id": merchant_order_id},
            )

        try:
            body = response.json()
        except ValueError as e:
            raise GatewayResponseError(
                "Gateway returned a non-JSON body",
                status_code=response.status_code,
                details={"merchant_order_id": merchant_order_id},
            ) from e
        if not isinstance(body, dict):
            raise GatewayResponseError(
                "Gateway returned an unexpected body",
                status_code=response.status_code,
                details={"merchant_order_id": merchant_order_id},
            )

        return StatusQueryResult.from_response(merchant_order_id, body)
