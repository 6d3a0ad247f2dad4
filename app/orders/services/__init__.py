"""
Order services.

- FulfillmentService: Provisions paid orders at the registry

Usage:
    from orders.services import build_fulfillment_service

    result = build_fulfillment_service().fulfill(order.pk, source="manual")
"""

from audit.services import AuditLogger
from orders.adapters import RdashClient
from orders.services.fulfillment_service import (
    FulfillmentOutcome,
    FulfillmentService,
)


def build_fulfillment_service() -> FulfillmentService:
    """Wire a FulfillmentService with clients built from settings."""
    return FulfillmentService(
        registry=RdashClient.from_settings(),
        audit=AuditLogger(),
    )


__all__ = [
    "FulfillmentOutcome",
    "FulfillmentService",
    "build_fulfillment_service",
]
