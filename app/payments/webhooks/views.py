"""
Callback endpoint for Duitku payment notifications.

The view:
1. Parses the body (form-encoded or JSON)
2. Normalizes it into a GatewayCallback
3. Verifies the callback signature
4. Hands the callback to the reconciliation core
5. Acknowledges with 200

Once a callback is authenticated and well-formed it is always
acknowledged, even when reconciliation fails internally. Failures are
logged, and the status poller converges the transaction later. An
error response would only make the gateway retry a signal we already
have.

Usage:
    # In urls.py
    from payments.webhooks.views import gateway_callback

    urlpatterns = [
        path("callback/", gateway_callback, name="gateway_callback"),
    ]
"""

from __future__ import annotations

import json
import logging

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from core.decorators import log_request
from payments.callbacks import GatewayCallback
from payments.exceptions import CallbackValidationError, InvalidSignatureError
from payments.services import build_reconciliation_service
from payments.signatures import SignatureVerifier
from payments.state_machines import ReconciliationSource

logger = logging.getLogger(__name__)


def parse_callback_body(request: HttpRequest) -> dict:
    """
    Read the callback body as a flat dict.

    Form-encoded bodies come from request.POST; anything else is tried
    as JSON.

    Raises:
        CallbackValidationError: Body is not a JSON object or valid form
    """
    if request.content_type == "application/x-www-form-urlencoded":
        return request.POST.dict()
    if request.content_type == "multipart/form-data":
        return request.POST.dict()

    try:
        payload = json.loads(request.body or b"")
    except (ValueError, UnicodeDecodeError) as e:
        raise CallbackValidationError("Callback body is not valid JSON") from e
    if not isinstance(payload, dict):
        raise CallbackValidationError("Callback body must be an object")
    return payload


@csrf_exempt
@require_POST
@log_request()
def gateway_callback(request: HttpRequest) -> JsonResponse:
    """
    Receive a payment result from the gateway.

    Returns:
        JsonResponse with status:
        - 200: {"success": true}, callback accepted (processed or not)
        - 400: Body unparseable or missing merchantOrderId/amount/signature
        - 401: Signature does not verify (nothing is written)
    """
    try:
        payload = parse_callback_body(request)
        callback = GatewayCallback.from_payload(payload)
    except CallbackValidationError as e:
        logger.warning(
            "Rejected malformed payment callback",
            extra={"error": e.message, "details": e.details},
        )
        return JsonResponse(
            {"success": False, "error": e.message}, status=e.http_status
        )

    logger.info(
        "Payment callback received",
        extra={
            "merchant_order_id": callback.merchant_order_id,
            "result_code": callback.result_code,
            "amount": callback.amount,
            "reference": callback.reference,
        },
    )

    verifier = SignatureVerifier.from_settings()
    if not verifier.verify_callback(
        amount=payload["amount"],
        merchant_order_id=callback.merchant_order_id,
        signature=callback.signature,
    ):
        error = InvalidSignatureError("Invalid signature")
        return JsonResponse(
            {"success": False, "error": error.message}, status=error.http_status
        )

    try:
        with build_reconciliation_service() as service:
            result = service.reconcile(callback, source=ReconciliationSource.WEBHOOK)
        if not result.success:
            logger.warning(
                "Payment callback not applied",
                extra={
                    "merchant_order_id": callback.merchant_order_id,
                    "error_code": result.error_code,
                },
            )
    except Exception:
        logger.exception(
            "Error reconciling payment callback",
            extra={"merchant_order_id": callback.merchant_order_id},
        )

    return JsonResponse({"success": True})
