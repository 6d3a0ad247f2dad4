"""
Workers for background payment processing.

- StatusPoller: Checks pending transactions against the gateway

Usage:
    from payments.workers import (
        poll_pending_transactions,
        reconcile_single_transaction,
    )

    poll_pending_transactions.delay()
    reconcile_single_transaction.delay("INV-20260401-0001")
"""

from payments.workers.status_poller import (
    poll_pending_transactions,
    reconcile_single_transaction,
)

__all__ = [
    "poll_pending_transactions",
    "reconcile_single_transaction",
]
