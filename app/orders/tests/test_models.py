"""
Tests for Order transitions and Domain upserts.

Tests cover:
- FSM transitions and their timestamp side effects
- Illegal transitions (completed and cancelled are terminal)
- Append-only notes
- Domain.upsert_from_registry field mapping and overwrite
"""

from datetime import datetime, timezone as dt_timezone

import pytest
from django.db import IntegrityError
from django_fsm import TransitionNotAllowed
from freezegun import freeze_time

from orders.models import Domain
from orders.state_machines import OrderStatus
from orders.tests.factories import DomainFactory, OrderFactory


# =============================================================================
# Order Transitions
# =============================================================================


@pytest.mark.django_db
class TestOrderTransitions:
    @freeze_time("2026-04-01 08:00:00")
    def test_mark_paid_sets_payment_fields(self):
        order = OrderFactory()

        order.mark_paid(reference="DK-991", payment_method="VC")
        order.save()
        order.refresh_from_db()

        assert order.status == OrderStatus.PAID
        assert order.paid_at == datetime(2026, 4, 1, 8, 0, tzinfo=dt_timezone.utc)
        assert order.gateway_reference == "DK-991"
        assert order.payment_method == "VC"

    def test_complete_clears_previous_error(self):
        order = OrderFactory(status=OrderStatus.PROCESSING, rdash_error="boom")

        order.complete({"success": True, "data": {"id": 1}})

        assert order.status == OrderStatus.COMPLETED
        assert order.completed_at is not None
        assert order.rdash_error == ""
        assert order.rdash_response == {"success": True, "data": {"id": 1}}

    def test_fail_provisioning_falls_back_to_paid(self):
        order = OrderFactory(status=OrderStatus.PROCESSING)

        order.fail_provisioning("Domain not available")

        assert order.status == OrderStatus.PAID
        assert order.rdash_error == "Domain not available"

    def test_abandon_provisioning_reopens_unpaid_order(self):
        order = OrderFactory(status=OrderStatus.PROCESSING)

        order.abandon_provisioning("Domain not available")

        assert order.status == OrderStatus.PENDING
        assert order.rdash_error == "Domain not available"

    def test_failure_requires_an_attempt_in_flight(self):
        order = OrderFactory(status=OrderStatus.PENDING)

        with pytest.raises(TransitionNotAllowed):
            order.fail_provisioning("Domain not available")

    def test_completed_order_cannot_be_reprovisioned(self):
        order = OrderFactory(status=OrderStatus.COMPLETED)

        with pytest.raises(TransitionNotAllowed):
            order.start_provisioning()

    def test_paid_order_cannot_be_cancelled(self):
        order = OrderFactory(status=OrderStatus.PAID)

        with pytest.raises(TransitionNotAllowed):
            order.cancel("Payment expired")

    def test_cancel_records_reason(self):
        order = OrderFactory()

        order.cancel("Payment expired")

        assert order.status == OrderStatus.CANCELLED
        assert order.cancelled_at is not None
        assert order.notes.endswith("Payment expired")

    def test_period_must_be_positive(self):
        with pytest.raises(IntegrityError):
            OrderFactory(period=0)


class TestOrderNotes:
    def test_append_note_keeps_history(self):
        order = OrderFactory.build(notes="")

        with freeze_time("2026-04-01 08:00:00"):
            order.append_note("Payment received")
        with freeze_time("2026-04-01 08:01:00"):
            order.append_note("Provisioning: Success")

        lines = order.notes.split("\n")
        assert lines == [
            "[2026-04-01T08:00:00+00:00] Payment received",
            "[2026-04-01T08:01:00+00:00] Provisioning: Success",
        ]


# =============================================================================
# Domain Upsert
# =============================================================================


@pytest.mark.django_db
class TestDomainUpsert:
    def test_creates_domain_from_registry_payload(self):
        order = OrderFactory(domain_name="toko.id", registry_customer_id=77)

        domain = Domain.upsert_from_registry(
            {
                "id": 9001,
                "name": "toko.id",
                "status": "active",
                "nameserver_1": "ns1.rdash.id",
                "ns2": "ns2.rdash.id",
                "expired_at": "2027-04-01 00:00:00",
            },
            order,
        )

        assert domain.id == 9001
        assert domain.customer_id == 77
        assert domain.order == order
        assert domain.nameservers == ["ns1.rdash.id", "ns2.rdash.id"]
        assert domain.expired_at.year == 2027

    def test_overwrites_existing_row(self):
        existing = DomainFactory(id=9002, name="old.id", status="pending")
        order = OrderFactory(domain_name="old.id")

        Domain.upsert_from_registry(
            {"id": "9002", "name": "old.id", "status": "active"}, order
        )

        existing.refresh_from_db()
        assert existing.status == "active"
        assert existing.order == order
        assert Domain.objects.filter(id=9002).count() == 1

    def test_payload_without_id_is_skipped(self):
        order = OrderFactory()

        assert Domain.upsert_from_registry({"name": "x.id"}, order) is None
        assert Domain.objects.count() == 0

    def test_date_only_expiry_is_accepted(self):
        order = OrderFactory()

        domain = Domain.upsert_from_registry(
            {"id": 9003, "expiry_date": "2028-01-15"}, order
        )

        assert domain.expired_at.date().isoformat() == "2028-01-15"
        assert domain.name == order.domain_name
