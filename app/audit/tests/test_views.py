"""
Tests for the operator audit log API.
"""

import pytest
from freezegun import freeze_time
from rest_framework.test import APIClient

from audit.models import AuditStatus
from audit.tests.factories import AuditLogFactory
from orders.tests.factories import StaffUserFactory, UserFactory

LIST_URL = "/api/v1/audit/logs/"


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def staff_client(api_client, db):
    api_client.force_authenticate(user=StaffUserFactory())
    return api_client


class TestAuditLogPermissions:
    def test_anonymous_is_rejected(self, api_client, db):
        response = api_client.get(LIST_URL)

        assert response.status_code == 401

    def test_customer_is_forbidden(self, api_client, db):
        api_client.force_authenticate(user=UserFactory())

        response = api_client.get(LIST_URL)

        assert response.status_code == 403


class TestAuditLogList:
    def test_lists_entries_newest_first(self, staff_client):
        with freeze_time("2026-03-01 10:00:00"):
            AuditLogFactory(resource="order/1")
        with freeze_time("2026-03-01 10:05:00"):
            AuditLogFactory(resource="order/2")

        response = staff_client.get(LIST_URL)

        assert response.status_code == 200
        results = response.json()["results"]
        assert [r["resource"] for r in results] == ["order/2", "order/1"]

    def test_filters_by_action_and_status(self, staff_client):
        AuditLogFactory(action="fulfill_order", status=AuditStatus.ERROR)
        AuditLogFactory(action="fulfill_order", status=AuditStatus.SUCCESS)
        AuditLogFactory(action="transaction_status_changed")

        response = staff_client.get(
            LIST_URL, {"action": "fulfill_order", "status": "error"}
        )

        results = response.json()["results"]
        assert len(results) == 1
        assert results[0]["status"] == "error"

    def test_filters_by_resource_prefix(self, staff_client):
        AuditLogFactory(resource="order/5")
        AuditLogFactory(resource="transaction/ORD-5-1")

        response = staff_client.get(LIST_URL, {"resource_prefix": "order/"})

        results = response.json()["results"]
        assert [r["resource"] for r in results] == ["order/5"]

    def test_retrieve_entry(self, staff_client):
        entry = AuditLogFactory(payload={"rdash_success": False, "message": "taken"})

        response = staff_client.get(f"{LIST_URL}{entry.pk}/")

        assert response.status_code == 200
        assert response.json()["payload"] == {
            "rdash_success": False,
            "message": "taken",
        }

    def test_entries_are_read_only(self, staff_client):
        entry = AuditLogFactory()

        response = staff_client.delete(f"{LIST_URL}{entry.pk}/")

        assert response.status_code == 405
