"""
Reconciliation core: applies payment signals to Transactions and Orders.

The callback endpoint and the status poller are two independent entry
points that deliver the same kind of signal (see payments.callbacks).
Both end up in ReconciliationService.reconcile(), which advances the
Transaction at most once per logical event.

Guarantees:
    - Idempotent: a signal whose status equals the stored one is a no-op
    - Monotonic: terminal statuses are never overwritten, and the write
      is a conditional UPDATE ... WHERE status = 'pending' so a racing
      writer that loses gets zero rows and does nothing
    - Every applied transition is audited with its source

Effects per new status:
    success: Transaction.paid_at set, Order pending -> paid, then the
             fulfillment orchestrator provisions the domain
    expired: Order cancelled, but only if it is still pending
    failed:  a note on the Order, which stays pending

The transition, its audit entry and the order effect share one database
transaction. Fulfillment runs after that commits.

Usage:
    from payments.services import build_reconciliation_service
    from payments.state_machines import ReconciliationSource

    service = build_reconciliation_service()
    result = service.reconcile(callback, source=ReconciliationSource.WEBHOOK)

    # One poller pass
    summary = service.poll_pending()
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

from django.utils import timezone

from audit.services import Actor
from core.services import BaseService, ServiceResult
from orders.models import Order
from orders.state_machines import FulfillmentSource, OrderStatus
from payments.exceptions import (
    AmountMismatchError,
    GatewayError,
    TransactionNotFoundError,
)
from payments.models import Transaction
from payments.state_machines import ReconciliationSource, TransactionStatus

if TYPE_CHECKING:
    from typing import Any

    from audit.services import AuditLogger
    from orders.services import FulfillmentOutcome, FulfillmentService
    from payments.adapters import DuitkuClient
    from payments.callbacks import PaymentSignal


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class ReconciliationOutcome:
    """
    Result of applying one signal.

    Attributes:
        merchant_order_id: Transaction the signal was about
        source: webhook or poller
        old_status: Stored status before the signal
        new_status: Stored status after the signal
        changed: Whether this call wrote the transition
        skipped_reason: Why nothing was written (empty when changed)
        fulfillment: Fulfillment outcome when a success triggered one
    """

    merchant_order_id: str
    source: str
    old_status: str
    new_status: str
    changed: bool = False
    skipped_reason: str = ""
    fulfillment: FulfillmentOutcome | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class PollSummary:
    checked: int = 0
    updated: int = 0
    failed: int = 0


# =============================================================================
# Service
# =============================================================================


class ReconciliationService(BaseService):
    """Moves payment signals into Transaction and Order state."""

    def __init__(
        self,
        fulfillment: FulfillmentService,
        audit: AuditLogger,
        gateway: DuitkuClient | None = None,
    ):
        self.fulfillment = fulfillment
        self.audit = audit
        self.gateway = gateway

    def close(self) -> None:
        """Close the HTTP sessions of both clients."""
        self.fulfillment.close()
        if self.gateway is not None:
            self.gateway.close()

    def __enter__(self) -> ReconciliationService:
        return self

    def __exit__(self, *exc_info) -> bool:
        self.close()
        return False

    # =========================================================================
    # Signal Application
    # =========================================================================

    def reconcile(
        self, signal: PaymentSignal, source: str
    ) -> ServiceResult[ReconciliationOutcome]:
        """
        Apply a callback or status-query result.

        Args:
            signal: GatewayCallback or StatusQueryResult
            source: ReconciliationSource value

        Returns:
            ServiceResult with a ReconciliationOutcome. No-ops are
            successes with changed=False. Failures carry
            TRANSACTION_NOT_FOUND or AMOUNT_MISMATCH and write nothing.
        """
        log = self.get_logger()
        merchant_order_id = signal.merchant_order_id

        tx = Transaction.objects.filter(merchant_order_id=merchant_order_id).first()
        if tx is None:
            log.warning(
                "Payment signal for unknown transaction",
                extra={"merchant_order_id": merchant_order_id, "source": source},
            )
            return ServiceResult.from_exception(
                TransactionNotFoundError(
                    f"Transaction {merchant_order_id} not found",
                    details={"merchant_order_id": merchant_order_id},
                )
            )

        target = signal.target_status()
        outcome = ReconciliationOutcome(
            merchant_order_id=merchant_order_id,
            source=str(source),
            old_status=tx.status,
            new_status=tx.status,
        )

        if tx.is_terminal:
            if target != tx.status:
                log.info(
                    "Ignoring signal for terminal transaction",
                    extra={
                        "merchant_order_id": merchant_order_id,
                        "current_status": tx.status,
                        "signalled_status": target,
                        "source": source,
                    },
                )
            outcome.skipped_reason = "already_terminal"
            return ServiceResult.success(outcome)

        if target == tx.status:
            outcome.skipped_reason = "no_change"
            return ServiceResult.success(outcome)

        if signal.amount is not None and signal.amount != tx.amount:
            log.warning(
                "Payment signal amount does not match transaction",
                extra={
                    "merchant_order_id": merchant_order_id,
                    "expected_amount": tx.amount,
                    "signalled_amount": signal.amount,
                    "source": source,
                },
            )
            return ServiceResult.from_exception(
                AmountMismatchError(
                    "Signal amount does not match the transaction amount",
                    details={
                        "merchant_order_id": merchant_order_id,
                        "expected": tx.amount,
                        "received": signal.amount,
                    },
                )
            )

        # Transition, audit entry and order effect commit together
        with self.atomic():
            if not self._advance(tx, signal, target):
                log.info(
                    "Transaction already advanced by a concurrent writer",
                    extra={"merchant_order_id": merchant_order_id, "source": source},
                )
                tx.refresh_from_db(fields=["status"])
                outcome.new_status = tx.status
                outcome.skipped_reason = "lost_race"
                return ServiceResult.success(outcome)

            outcome.new_status = target
            outcome.changed = True
            log.info(
                "Transaction status changed",
                extra={
                    "merchant_order_id": merchant_order_id,
                    "old_status": outcome.old_status,
                    "new_status": target,
                    "source": source,
                },
            )
            self.audit.record(
                action="transaction_status_changed",
                resource=f"transaction/{merchant_order_id}",
                actor=Actor.system(source),
                payload={
                    "transaction_id": str(tx.pk),
                    "merchant_order_id": merchant_order_id,
                    "old_status": outcome.old_status,
                    "new_status": target,
                    "source": str(source),
                },
            )

            if target == TransactionStatus.SUCCESS:
                order = self._mark_order_paid(tx, signal, source)
            elif target == TransactionStatus.EXPIRED:
                self._cancel_order(tx, source)
            else:
                self._note_failed_payment(tx, signal)

        # Registry call runs after commit
        if target == TransactionStatus.SUCCESS:
            outcome.fulfillment = self._fulfill(order, tx)

        return ServiceResult.success(outcome)

    def _advance(self, tx: Transaction, signal: PaymentSignal, target: str) -> bool:
        """Conditionally move a PENDING transaction to target. False if lost."""
        now = timezone.now()
        updates: dict[str, Any] = {
            "status": target,
            "status_code": signal.result_code[:10],
            "status_message": signal.status_message[:255],
            "updated_at": now,
        }
        if signal.reference:
            updates["external_reference"] = signal.reference
        if signal.payment_method:
            updates["payment_method"] = signal.payment_method[:20]
        if target == TransactionStatus.SUCCESS:
            updates["paid_at"] = now

        rows = Transaction.objects.filter(
            pk=tx.pk, status=TransactionStatus.PENDING
        ).update(**updates)
        return rows == 1

    # =========================================================================
    # Order Effects
    # =========================================================================

    def _mark_order_paid(
        self, tx: Transaction, signal: PaymentSignal, source: str
    ) -> Order:
        order = Order.objects.select_for_update().get(pk=tx.order_id)
        if order.status not in (OrderStatus.PENDING, OrderStatus.PROCESSING):
            self.get_logger().info(
                "Order not pending, payment recorded on transaction only",
                extra={
                    "order_id": order.pk,
                    "order_status": order.status,
                    "merchant_order_id": tx.merchant_order_id,
                },
            )
            return order

        order.mark_paid(
            reference=signal.reference,
            payment_method=signal.payment_method,
        )
        order.append_note(
            f"Payment received via {source}: {tx.merchant_order_id}"
            f" (ref {signal.reference or '-'})"
        )
        order.save()
        return order

    def _fulfill(self, order: Order, tx: Transaction) -> FulfillmentOutcome | None:
        result = self.fulfillment.fulfill(
            order.pk,
            actor=Actor.system(FulfillmentSource.PAYMENT_WEBHOOK),
            source=FulfillmentSource.PAYMENT_WEBHOOK,
        )
        if not result.success:
            self.get_logger().warning(
                "Fulfillment after payment did not succeed",
                extra={
                    "order_id": order.pk,
                    "merchant_order_id": tx.merchant_order_id,
                    "error_code": result.error_code,
                },
            )
        return result.data

    def _cancel_order(self, tx: Transaction, source: str) -> None:
        order = Order.objects.select_for_update().get(pk=tx.order_id)
        if order.status != OrderStatus.PENDING:
            self.get_logger().info(
                "Payment expired for non-pending order, leaving order as is",
                extra={
                    "order_id": order.pk,
                    "order_status": order.status,
                    "merchant_order_id": tx.merchant_order_id,
                },
            )
            return
        order.cancel(reason=f"Payment expired: {tx.merchant_order_id}")
        order.save()

        self.audit.record(
            action="order_cancelled",
            resource=f"order/{order.pk}",
            actor=Actor.system(source),
            payload={
                "transaction_id": str(tx.pk),
                "merchant_order_id": tx.merchant_order_id,
                "reason": "payment_expired",
                "source": str(source),
            },
        )

    @staticmethod
    def _note_failed_payment(tx: Transaction, signal: PaymentSignal) -> None:
        order = Order.objects.select_for_update().get(pk=tx.order_id)
        if order.status != OrderStatus.PENDING:
            return
        detail = signal.status_message or f"code {signal.result_code}"
        order.append_note(f"Payment failed: {tx.merchant_order_id} ({detail})")
        order.save(update_fields=["notes", "updated_at"])

    # =========================================================================
    # Polling
    # =========================================================================

    def check_transaction(
        self, merchant_order_id: str
    ) -> ServiceResult[ReconciliationOutcome]:
        """
        Query the gateway for one transaction and apply the answer.

        Raises:
            GatewayError: The status query failed
        """
        if self.gateway is None:
            raise RuntimeError("ReconciliationService was built without a gateway")
        signal = self.gateway.check_status(merchant_order_id)
        return self.reconcile(signal, source=ReconciliationSource.POLLER)

    def poll_pending(self, limit: int | None = None) -> PollSummary:
        """
        Run one poller pass over every pending transaction.

        Each transaction is isolated: an error is logged and counted in
        ``failed`` and the pass moves on.
        """
        log = self.get_logger()
        queryset = Transaction.objects.pending().order_by("created_at")
        if limit is not None:
            queryset = queryset[:limit]
        merchant_order_ids = list(queryset.values_list("merchant_order_id", flat=True))

        summary = PollSummary()
        for merchant_order_id in merchant_order_ids:
            summary.checked += 1
            try:
                result = self.check_transaction(merchant_order_id)
            except GatewayError as e:
                summary.failed += 1
                log.warning(
                    "Status query failed",
                    extra={
                        "merchant_order_id": merchant_order_id,
                        "error_code": e.error_code,
                        "retryable": e.is_retryable,
                    },
                )
                continue
            except Exception:
                summary.failed += 1
                log.exception(
                    "Status check failed",
                    extra={"merchant_order_id": merchant_order_id},
                )
                continue

            if not result.success:
                summary.failed += 1
            elif result.data.changed:
                summary.updated += 1

        log.info(
            "Pending transaction poll finished",
            extra={
                "checked": summary.checked,
                "updated": summary.updated,
                "failed": summary.failed,
            },
        )
        return summary
