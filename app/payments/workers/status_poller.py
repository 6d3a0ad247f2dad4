"""
Status poller for pending gateway transactions.

Callbacks can be lost or arrive late, so every pending Transaction is
also checked against the gateway's status API on a schedule. Results go
through the same reconciliation core as callbacks, so a poll and a
callback for the same payment cannot both apply a transition.

Tasks:
- poll_pending_transactions: Periodic task, one pass over all pending rows
- reconcile_single_transaction: On-demand check for one merchant order id

Usage:
    from payments.workers import poll_pending_transactions

    poll_pending_transactions.delay()
    reconcile_single_transaction.delay("INV-20260401-0001")

Celery Beat Schedule:
    Installed by migration 0002_add_status_poller_schedule as a
    django-celery-beat PeriodicTask running every
    PAYMENT_POLL_INTERVAL_SECONDS (default 60).

Note:
    There is no global lock. Overlapping passes are safe because every
    transition is a conditional update on PENDING rows.
"""

from __future__ import annotations

import logging

from celery import shared_task

from payments.exceptions import GatewayError

logger = logging.getLogger(__name__)


# =============================================================================
# Periodic Task: Poll All Pending
# =============================================================================


@shared_task(bind=True)
def poll_pending_transactions(self, limit: int | None = None) -> dict:
    """
    Check every pending transaction against the gateway.

    Args:
        limit: Optional cap on transactions checked in this pass

    Returns:
        Dict with:
        - status: "completed" or "failed"
        - checked: Transactions queried
        - updated: Transactions whose status changed
        - failed: Transactions whose check raised or was refused
        - error: Error message if the pass itself failed
    """
    from payments.services import build_reconciliation_service

    logger.info("Starting pending transaction poll", extra={"limit": limit})

    try:
        with build_reconciliation_service() as service:
            summary = service.poll_pending(limit=limit)
    except Exception as e:
        logger.exception(
            "Pending transaction poll failed",
            extra={"task_id": self.request.id},
        )
        return {
            "status": "failed",
            "checked": 0,
            "updated": 0,
            "failed": 0,
            "error": str(e),
        }

    return {
        "status": "completed",
        "checked": summary.checked,
        "updated": summary.updated,
        "failed": summary.failed,
    }


# =============================================================================
# On-Demand Task: Single Transaction
# =============================================================================


@shared_task(bind=True)
def reconcile_single_transaction(self, merchant_order_id: str) -> dict:
    """
    Check one transaction against the gateway and apply the result.

    Args:
        merchant_order_id: Merchant order id of the Transaction

    Returns:
        Dict with:
        - status: "updated", "unchanged", "not_found" or "failed"
        - merchant_order_id: The id processed
        - old_status / new_status: When the check completed
        - error / error_code: When it did not
    """
    from payments.services import build_reconciliation_service

    logger.info(
        "Reconciling single transaction",
        extra={"merchant_order_id": merchant_order_id},
    )

    try:
        with build_reconciliation_service() as service:
            result = service.check_transaction(merchant_order_id)
    except GatewayError as e:
        logger.warning(
            "Gateway status query failed",
            extra={
                "merchant_order_id": merchant_order_id,
                "error_code": e.error_code,
                "retryable": e.is_retryable,
            },
        )
        return {
            "status": "failed",
            "merchant_order_id": merchant_order_id,
            "error": e.message,
            "error_code": e.error_code,
        }
    except Exception as e:
        logger.exception(
            "Unexpected error reconciling transaction",
            extra={"merchant_order_id": merchant_order_id},
        )
        return {
            "status": "failed",
            "merchant_order_id": merchant_order_id,
            "error": str(e),
            "error_code": "UNEXPECTED_ERROR",
        }

    if not result.success:
        return {
            "status": "not_found"
            if result.error_code == "TRANSACTION_NOT_FOUND"
            else "failed",
            "merchant_order_id": merchant_order_id,
            "error": result.error,
            "error_code": result.error_code,
        }

    outcome = result.data
    return {
        "status": "updated" if outcome.changed else "unchanged",
        "merchant_order_id": merchant_order_id,
        "old_status": outcome.old_status,
        "new_status": outcome.new_status,
    }
