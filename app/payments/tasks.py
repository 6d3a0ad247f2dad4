"""
Celery task registry for the payments app.

Celery autodiscovery imports ``<app>.tasks``; the task bodies live in
payments.workers and keep their module path as the task name
(e.g. ``payments.workers.status_poller.poll_pending_transactions``).

Usage:
    from payments.tasks import reconcile_single_transaction

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
