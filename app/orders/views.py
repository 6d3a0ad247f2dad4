"""
Operator endpoint for (re)provisioning an order at the registry.

Endpoints:
    POST /api/v1/orders/{id}/provision/ - Run fulfillment for one order

Responses:
    200 - Provisioned, or already completed (no-op)
    400 - Order is missing fields its action needs
    404 - Unknown order
    409 - Order is cancelled
    502 - Registry rejected the request or was unreachable

Security:
    Staff accounts only (JWT or session auth).
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from audit.services import Actor
from orders.serializers import ProvisionErrorSerializer, ProvisionSuccessSerializer
from orders.services import build_fulfillment_service
from orders.state_machines import FulfillmentSource

logger = logging.getLogger(__name__)

# Failure error_code -> HTTP status. Anything unlisted is a provider failure.
ERROR_STATUS = {
    "ORDER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "ORDER_CANCELLED": status.HTTP_409_CONFLICT,
    "ORDER_NOT_ACTIONABLE": status.HTTP_400_BAD_REQUEST,
    "MISSING_REGISTRY_DOMAIN_ID": status.HTTP_400_BAD_REQUEST,
}


class ProvisionOrderView(APIView):
    """
    Run the fulfillment orchestrator for an order on operator request.

    POST /api/v1/orders/{id}/provision/

    Returns:
        {"success": true, "data": {...outcome...}}
        {"success": false, "error": "...", "error_code": "...", "data": {...}}
    """

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="provision_order",
        summary="Provision order at the registry",
        request=None,
        responses={
            200: ProvisionSuccessSerializer,
            400: ProvisionErrorSerializer,
            404: ProvisionErrorSerializer,
            409: ProvisionErrorSerializer,
            502: ProvisionErrorSerializer,
        },
        tags=["Orders"],
    )
    def post(self, request, pk: int):
        with build_fulfillment_service() as service:
            result = service.fulfill(
                pk,
                actor=Actor.from_request(request),
                source=FulfillmentSource.MANUAL,
            )

        if result.success:
            return Response({"success": True, "data": result.data.to_dict()})

        body = result.to_response()
        if result.data is not None:
            body["data"] = result.data.to_dict()

        http_status = ERROR_STATUS.get(result.error_code, status.HTTP_502_BAD_GATEWAY)
        logger.info(
            "Manual provisioning failed",
            extra={
                "order_id": pk,
                "error_code": result.error_code,
                "operator": request.user.get_username(),
            },
        )
        return Response(body, status=http_status)
