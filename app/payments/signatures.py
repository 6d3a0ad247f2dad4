"""
Duitku request and callback signatures.

Duitku signs with hex MD5 over concatenated fields plus the merchant
API key:

    callback:      md5(merchantCode + amount + merchantOrderId + apiKey)
    status query:  md5(merchantCode + merchantOrderId + apiKey)

Usage:
    from payments.signatures import SignatureVerifier

    verifier = SignatureVerifier.from_settings()
    if not verifier.verify_callback(
        amount="150000",
        merchant_order_id="INV-1",
        signature=request.POST["signature"],
    ):
        ...
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass

from django.conf import settings

logger = logging.getLogger(__name__)


def md5_hex(*parts: object) -> str:
    return hashlib.md5("".join(str(p) for p in parts).encode("utf-8")).hexdigest()


def callback_signature(
    merchant_code: str, amount: object, merchant_order_id: str, api_key: str
) -> str:
    return md5_hex(merchant_code, amount, merchant_order_id, api_key)


def status_query_signature(
    merchant_code: str, merchant_order_id: str, api_key: str
) -> str:
    return md5_hex(merchant_code, merchant_order_id, api_key)


@dataclass(frozen=True)
class SignatureVerifier:
    """Holds the merchant credentials used to sign and verify."""

    merchant_code: str
    api_key: str

    @classmethod
    def from_settings(cls) -> SignatureVerifier:
        return cls(
            merchant_code=settings.DUITKU_MERCHANT_CODE,
            api_key=settings.DUITKU_API_KEY,
        )

    def verify_callback(
        self,
        *,
        amount: object,
        merchant_order_id: str,
        signature: str | None,
    ) -> bool:
        """
        Check a callback signature.

        Comparison is case-insensitive and constant-time. Never raises;
        any missing input yields False.
        """
        if not signature or not merchant_order_id or amount in (None, ""):
            return False
        expected = callback_signature(
            self.merchant_code, amount, merchant_order_id, self.api_key
        )
        matched = hmac.compare_digest(
            expected.lower().encode("utf-8"),
            str(signature).strip().lower().encode("utf-8"),
        )
        if not matched:
            logger.warning(
                "Callback signature mismatch",
                extra={"merchant_order_id": merchant_order_id},
            )
        return matched

    def sign_status_query(self, merchant_order_id: str) -> str:
        return status_query_signature(
            self.merchant_code, merchant_order_id, self.api_key
        )
