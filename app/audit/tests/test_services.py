"""
Tests for the best-effort audit logger.

Tests cover:
- Actor construction (system, request-derived)
- Successful writes
- Write failures never propagating to the caller
- Append-only enforcement on the model
"""

from unittest.mock import patch

import pytest
from django.contrib.auth.models import AnonymousUser
from django.db import DatabaseError, transaction
from django.test import RequestFactory

from audit.models import AuditLog, AuditStatus
from audit.services import Actor, AuditLogger
from audit.tests.factories import AuditLogFactory
from core.exceptions import ConflictError
from orders.tests.factories import StaffUserFactory


# =============================================================================
# Actor
# =============================================================================


class TestActor:
    def test_system_actor_has_no_user(self):
        actor = Actor.system("poller")

        assert actor.label == "system:poller"
        assert actor.user_id is None
        assert actor.is_system

    def test_from_request_uses_authenticated_user(self, db):
        operator = StaffUserFactory(username="alice")
        request = RequestFactory().post("/", REMOTE_ADDR="10.0.0.5")
        request.user = operator

        actor = Actor.from_request(request)

        assert actor.label == "alice"
        assert actor.user_id == operator.pk
        assert actor.ip_address == "10.0.0.5"
        assert not actor.is_system

    def test_from_request_prefers_forwarded_for(self):
        request = RequestFactory().post(
            "/",
            REMOTE_ADDR="10.0.0.5",
            HTTP_X_FORWARDED_FOR="203.0.113.7, 10.0.0.1",
        )
        request.user = AnonymousUser()

        actor = Actor.from_request(request)

        assert actor.label == "anonymous"
        assert actor.ip_address == "203.0.113.7"


# =============================================================================
# AuditLogger
# =============================================================================


class TestAuditLogger:
    def test_record_creates_entry(self, db):
        entry = AuditLogger().record(
            action="fulfill_order",
            resource="order/7",
            actor=Actor.system("payment_webhook"),
            payload={"source": "payment_webhook", "rdash_success": True},
        )

        assert entry is not None
        stored = AuditLog.objects.get(pk=entry.pk)
        assert stored.actor_label == "system:payment_webhook"
        assert stored.actor is None
        assert stored.payload == {"source": "payment_webhook", "rdash_success": True}
        assert stored.status == AuditStatus.SUCCESS

    def test_record_links_operator(self, db):
        operator = StaffUserFactory()
        actor = Actor(
            label=operator.username, user_id=operator.pk, ip_address="127.0.0.1"
        )

        entry = AuditLogger().record(
            action="fulfill_order",
            resource="order/8",
            actor=actor,
            status=AuditStatus.ERROR,
        )

        assert entry.actor == operator
        assert entry.ip_address == "127.0.0.1"
        assert entry.status == AuditStatus.ERROR

    def test_record_defaults_to_unknown_system_actor(self, db):
        entry = AuditLogger().record(action="ping", resource="system/1")

        assert entry.actor_label == "system:unknown"

    def test_write_failure_is_swallowed(self, db):
        with patch.object(
            AuditLog.objects, "create", side_effect=DatabaseError("disk full")
        ):
            entry = AuditLogger().record(action="fulfill_order", resource="order/9")

        assert entry is None
        assert AuditLog.objects.count() == 0

    def test_write_failure_does_not_break_outer_transaction(self, db):
        with transaction.atomic():
            with patch.object(
                AuditLog.objects, "create", side_effect=DatabaseError("boom")
            ):
                AuditLogger().record(action="fulfill_order", resource="order/10")
            # The enclosing transaction is still usable
            AuditLogFactory(resource="order/10")

        assert AuditLog.objects.filter(resource="order/10").count() == 1


# =============================================================================
# Append-only model
# =============================================================================


class TestAuditLogImmutability:
    def test_update_is_rejected(self, db):
        entry = AuditLogFactory()
        entry.status = AuditStatus.ERROR

        with pytest.raises(ConflictError) as exc_info:
            entry.save()

        assert exc_info.value.error_code == "AUDIT_LOG_IMMUTABLE"
        entry.refresh_from_db()
        assert entry.status == AuditStatus.SUCCESS

    def test_delete_is_rejected(self, db):
        entry = AuditLogFactory()

        with pytest.raises(ConflictError):
            entry.delete()

        assert AuditLog.objects.filter(pk=entry.pk).exists()
