"""
Payment services.

- ReconciliationService: Applies gateway signals to Transactions and Orders

Usage:
    from payments.services import build_reconciliation_service

    service = build_reconciliation_service()
    service.reconcile(callback, source=ReconciliationSource.WEBHOOK)
    service.poll_pending()
"""

from audit.services import AuditLogger
from orders.services import build_fulfillment_service
from payments.adapters import DuitkuClient
from payments.services.reconciliation_service import (
    PollSummary,
    ReconciliationOutcome,
    ReconciliationService,
)


def build_reconciliation_service() -> ReconciliationService:
    """Wire a ReconciliationService with clients built from settings."""
    return ReconciliationService(
        fulfillment=build_fulfillment_service(),
        audit=AuditLogger(),
        gateway=DuitkuClient.from_settings(),
    )


__all__ = [
    "PollSummary",
    "ReconciliationOutcome",
    "ReconciliationService",
    "build_reconciliation_service",
]
