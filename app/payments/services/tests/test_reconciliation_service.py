"""
Tests for ReconciliationService.

Tests cover:
- Idempotency: repeated signals leave one transition and one audit entry
- Monotonicity: the first terminal status wins
- Lost races and interleaved callbacks on the conditional update
- A failed order update rolls the transaction back to pending
- Amount mismatch and unknown transactions write nothing
- Success marks the order paid and provisions it
- Expiry cancels only pending orders, failure notes the order
- Poller passes isolate per-transaction errors
"""

from unittest.mock import MagicMock

import pytest
from django.db import OperationalError

from audit.models import AuditLog
from audit.services import AuditLogger
from orders.adapters import RdashClient, RegistryResult
from orders.exceptions import TerminalProviderError
from orders.models import Domain
from orders.services import FulfillmentService
from orders.state_machines import OrderStatus
from orders.tests.factories import OrderFactory
from payments.adapters import DuitkuClient
from payments.callbacks import GatewayCallback, StatusQueryResult
from payments.exceptions import GatewayTimeoutError
from payments.models import Transaction
from payments.services import ReconciliationService
from payments.state_machines import ReconciliationSource, TransactionStatus
from payments.tests.factories import TransactionFactory, callback_payload

WEBHOOK = ReconciliationSource.WEBHOOK


@pytest.fixture
def registry():
    client = MagicMock(spec=RdashClient)
    client.register_domain.return_value = RegistryResult(
        data={"id": 9901, "name": "toko.id", "status": "active"},
        message="Domain registered",
        raw={"success": True, "data": {"id": 9901}},
    )
    return client


@pytest.fixture
def gateway():
    return MagicMock(spec=DuitkuClient)


@pytest.fixture
def service(registry, gateway):
    audit = AuditLogger()
    return ReconciliationService(
        fulfillment=FulfillmentService(registry=registry, audit=audit),
        audit=audit,
        gateway=gateway,
    )


def callback_for(tx, result_code="00", **kwargs):
    return GatewayCallback.from_payload(callback_payload(tx, result_code, **kwargs))


def status_query_for(tx, status_code, amount=None):
    body = {"merchantOrderId": tx.merchant_order_id, "statusCode": status_code}
    if amount is not None:
        body["amount"] = str(amount)
    return StatusQueryResult.from_response(tx.merchant_order_id, body)


# =============================================================================
# Success
# =============================================================================


@pytest.mark.django_db
class TestSuccess:
    def test_marks_transaction_and_order_paid_then_provisions(
        self, service, registry
    ):
        tx = TransactionFactory()

        result = service.reconcile(callback_for(tx, "00"), source=WEBHOOK)

        assert result.success
        assert result.data.changed
        assert result.data.old_status == TransactionStatus.PENDING
        assert result.data.new_status == TransactionStatus.SUCCESS
        assert result.data.fulfillment.rdash_success

        tx.refresh_from_db()
        assert tx.status == TransactionStatus.SUCCESS
        assert tx.paid_at is not None
        assert tx.status_code == "00"
        assert tx.external_reference == f"DK{tx.merchant_order_id[-4:]}"

        order = tx.order
        order.refresh_from_db()
        assert order.status == OrderStatus.COMPLETED
        assert order.paid_at is not None
        assert "Payment received via webhook" in order.notes
        registry.register_domain.assert_called_once()

    def test_transition_is_audited(self, service):
        tx = TransactionFactory()

        service.reconcile(callback_for(tx, "00"), source=WEBHOOK)

        entry = AuditLog.objects.get(action="transaction_status_changed")
        assert entry.resource == f"transaction/{tx.merchant_order_id}"
        assert entry.actor_label == "system:webhook"
        assert entry.payload == {
            "transaction_id": str(tx.pk),
            "merchant_order_id": tx.merchant_order_id,
            "old_status": "pending",
            "new_status": "success",
            "source": "webhook",
        }

    def test_provisioning_failure_leaves_order_paid(self, service, registry):
        registry.register_domain.side_effect = TerminalProviderError(
            "Domain not available"
        )
        tx = TransactionFactory()

        result = service.reconcile(callback_for(tx, "00"), source=WEBHOOK)

        assert result.success
        assert result.data.changed
        assert not result.data.fulfillment.rdash_success
        tx.refresh_from_db()
        assert tx.status == TransactionStatus.SUCCESS
        tx.order.refresh_from_db()
        assert tx.order.status == OrderStatus.PAID
        assert tx.order.rdash_error == "Domain not available"

    def test_completed_order_is_not_reprovisioned(self, service, registry):
        order = OrderFactory(status=OrderStatus.COMPLETED)
        tx = TransactionFactory(order=order)

        result = service.reconcile(callback_for(tx, "00"), source=WEBHOOK)

        assert result.success
        assert result.data.fulfillment.already_completed
        registry.register_domain.assert_not_called()


# =============================================================================
# Idempotency and Monotonicity
# =============================================================================


@pytest.mark.django_db
class TestIdempotency:
    def test_replayed_success_is_a_noop(self, service, registry):
        tx = TransactionFactory()
        callback = callback_for(tx, "00")

        service.reconcile(callback, source=WEBHOOK)
        replay = service.reconcile(callback, source=WEBHOOK)

        assert replay.success
        assert not replay.data.changed
        assert replay.data.skipped_reason == "already_terminal"
        assert (
            AuditLog.objects.filter(action="transaction_status_changed").count() == 1
        )
        registry.register_domain.assert_called_once()

    def test_pending_signal_for_pending_transaction(self, service):
        tx = TransactionFactory()

        result = service.reconcile(status_query_for(tx, "01"), source=WEBHOOK)

        assert result.success
        assert result.data.skipped_reason == "no_change"
        assert not AuditLog.objects.exists()

    def test_first_terminal_status_wins(self, service):
        tx = TransactionFactory()

        service.reconcile(callback_for(tx, "01"), source=WEBHOOK)
        result = service.reconcile(
            status_query_for(tx, "00", amount=tx.amount),
            source=ReconciliationSource.POLLER,
        )

        assert not result.data.changed
        assert result.data.new_status == TransactionStatus.FAILED
        tx.refresh_from_db()
        assert tx.status == TransactionStatus.FAILED
        assert tx.paid_at is None

    def test_lost_race_writes_nothing(self, service, monkeypatch):
        tx = TransactionFactory()
        advance = service._advance

        def concurrent_writer_first(tx_, signal, target):
            Transaction.objects.filter(pk=tx_.pk).update(
                status=TransactionStatus.FAILED
            )
            return advance(tx_, signal, target)

        monkeypatch.setattr(service, "_advance", concurrent_writer_first)

        result = service.reconcile(callback_for(tx, "00"), source=WEBHOOK)

        assert result.success
        assert not result.data.changed
        assert result.data.skipped_reason == "lost_race"
        assert result.data.new_status == TransactionStatus.FAILED
        assert not AuditLog.objects.exists()
        tx.order.refresh_from_db()
        assert tx.order.status == OrderStatus.PENDING

    def test_interleaved_callbacks_apply_once(self, service, registry, monkeypatch):
        tx = TransactionFactory()
        callback = callback_for(tx, "00")
        rival = ReconciliationService(
            fulfillment=FulfillmentService(registry=registry, audit=AuditLogger()),
            audit=AuditLogger(),
        )
        rival_results = []
        advance = service._advance

        def rival_updates_first(tx_, signal, target):
            rival_results.append(
                rival.reconcile(callback, source=ReconciliationSource.POLLER)
            )
            return advance(tx_, signal, target)

        monkeypatch.setattr(service, "_advance", rival_updates_first)

        result = service.reconcile(callback, source=WEBHOOK)

        assert result.data.skipped_reason == "lost_race"
        assert result.data.new_status == TransactionStatus.SUCCESS
        assert rival_results[0].data.changed
        transitions = AuditLog.objects.filter(action="transaction_status_changed")
        assert transitions.count() == 1
        assert transitions.get().payload["source"] == "poller"
        tx.order.refresh_from_db()
        assert tx.order.status == OrderStatus.COMPLETED
        assert Domain.objects.count() == 1
        registry.register_domain.assert_called_once()

    def test_order_update_failure_rolls_back_transition(
        self, service, registry, monkeypatch
    ):
        tx = TransactionFactory()
        callback = callback_for(tx, "00")

        def database_blip(*args):
            raise OperationalError("server closed the connection unexpectedly")

        monkeypatch.setattr(service, "_mark_order_paid", database_blip)

        with pytest.raises(OperationalError):
            service.reconcile(callback, source=WEBHOOK)

        tx.refresh_from_db()
        assert tx.status == TransactionStatus.PENDING
        assert tx.paid_at is None
        assert not AuditLog.objects.exists()
        registry.register_domain.assert_not_called()

        monkeypatch.undo()
        replay = service.reconcile(callback, source=WEBHOOK)

        assert replay.data.changed
        tx.order.refresh_from_db()
        assert tx.order.status == OrderStatus.COMPLETED
        registry.register_domain.assert_called_once()


# =============================================================================
# Rejections
# =============================================================================


@pytest.mark.django_db
class TestRejections:
    def test_amount_mismatch_writes_nothing(self, service, registry):
        tx = TransactionFactory(amount=150000)

        result = service.reconcile(
            callback_for(tx, "00", amount=1000), source=WEBHOOK
        )

        assert not result.success
        assert result.error_code == "AMOUNT_MISMATCH"
        tx.refresh_from_db()
        assert tx.status == TransactionStatus.PENDING
        assert not AuditLog.objects.exists()
        registry.register_domain.assert_not_called()

    def test_status_query_without_amount_skips_amount_check(self, service):
        tx = TransactionFactory()

        result = service.reconcile(
            status_query_for(tx, "02"), source=ReconciliationSource.POLLER
        )

        assert result.data.changed
        assert result.data.new_status == TransactionStatus.EXPIRED

    def test_unknown_transaction(self, service):
        signal = StatusQueryResult.from_response("INV-MISSING", {"statusCode": "00"})

        result = service.reconcile(signal, source=WEBHOOK)

        assert not result.success
        assert result.error_code == "TRANSACTION_NOT_FOUND"
        assert not AuditLog.objects.exists()


# =============================================================================
# Failure and Expiry
# =============================================================================


@pytest.mark.django_db
class TestFailureAndExpiry:
    def test_failed_payment_notes_pending_order(self, service):
        tx = TransactionFactory()

        result = service.reconcile(callback_for(tx, "01"), source=WEBHOOK)

        assert result.data.new_status == TransactionStatus.FAILED
        tx.order.refresh_from_db()
        assert tx.order.status == OrderStatus.PENDING
        assert f"Payment failed: {tx.merchant_order_id}" in tx.order.notes
        assert not AuditLog.objects.filter(action="order_cancelled").exists()

    def test_expiry_cancels_pending_order(self, service):
        tx = TransactionFactory()

        service.reconcile(callback_for(tx, "02"), source=WEBHOOK)

        order = tx.order
        order.refresh_from_db()
        assert order.status == OrderStatus.CANCELLED
        assert order.cancelled_at is not None
        entry = AuditLog.objects.get(action="order_cancelled")
        assert entry.resource == f"order/{order.pk}"
        assert entry.payload["reason"] == "payment_expired"

    def test_expiry_leaves_paid_order_alone(self, service):
        order = OrderFactory(status=OrderStatus.PAID)
        tx = TransactionFactory(order=order)

        result = service.reconcile(callback_for(tx, "02"), source=WEBHOOK)

        assert result.data.changed
        order.refresh_from_db()
        assert order.status == OrderStatus.PAID
        assert not AuditLog.objects.filter(action="order_cancelled").exists()

    def test_expiry_cancels_order_after_failed_manual_provisioning(
        self, service, registry
    ):
        registry.register_domain.side_effect = TerminalProviderError(
            "Domain not available"
        )
        tx = TransactionFactory()
        service.fulfillment.fulfill(tx.order_id)

        service.reconcile(
            status_query_for(tx, "02"), source=ReconciliationSource.POLLER
        )

        tx.order.refresh_from_db()
        assert tx.order.status == OrderStatus.CANCELLED
        assert tx.order.paid_at is None


# =============================================================================
# Polling
# =============================================================================


@pytest.mark.django_db
class TestPolling:
    def test_check_transaction_uses_poller_source(self, service, gateway):
        tx = TransactionFactory()
        gateway.check_status.return_value = status_query_for(tx, "02")

        result = service.check_transaction(tx.merchant_order_id)

        gateway.check_status.assert_called_once_with(tx.merchant_order_id)
        assert result.data.source == "poller"
        entry = AuditLog.objects.get(action="transaction_status_changed")
        assert entry.actor_label == "system:poller"

    def test_check_transaction_requires_gateway(self, registry):
        service = ReconciliationService(
            fulfillment=FulfillmentService(registry=registry, audit=AuditLogger()),
            audit=AuditLogger(),
        )

        with pytest.raises(RuntimeError):
            service.check_transaction("INV-1")

    def test_poll_pending_isolates_failures(self, service, gateway):
        broken = TransactionFactory()
        expiring = TransactionFactory()
        still_pending = TransactionFactory()
        TransactionFactory(status=TransactionStatus.FAILED)

        def check_status(merchant_order_id):
            if merchant_order_id == broken.merchant_order_id:
                raise GatewayTimeoutError("Duitku API timed out")
            if merchant_order_id == expiring.merchant_order_id:
                return status_query_for(expiring, "02")
            return status_query_for(still_pending, "01")

        gateway.check_status.side_effect = check_status

        summary = service.poll_pending()

        assert (summary.checked, summary.updated, summary.failed) == (3, 1, 1)
        expiring.refresh_from_db()
        assert expiring.status == TransactionStatus.EXPIRED
        broken.refresh_from_db()
        assert broken.status == TransactionStatus.PENDING

    def test_poll_pending_counts_unexpected_errors(self, service, gateway):
        TransactionFactory()
        gateway.check_status.side_effect = ValueError("boom")

        summary = service.poll_pending()

        assert summary.failed == 1

    def test_poll_pending_respects_limit(self, service, gateway):
        first = TransactionFactory()
        TransactionFactory()
        gateway.check_status.return_value = status_query_for(first, "01")

        summary = service.poll_pending(limit=1)

        assert summary.checked == 1
        gateway.check_status.assert_called_once_with(first.merchant_order_id)


class TestLifecycle:
    def test_context_manager_closes_both_clients(self, service, registry, gateway):
        with service:
            pass

        registry.close.assert_called_once_with()
        gateway.close.assert_called_once_with()
