"""
Tests for the check_pending_payments management command.
"""

from io import StringIO
from unittest.mock import patch

import pytest
from django.core.management import call_command

from payments.callbacks import StatusQueryResult
from payments.exceptions import GatewayTimeoutError
from payments.state_machines import TransactionStatus
from payments.tests.factories import TransactionFactory


@pytest.fixture
def duitku():
    with patch("payments.services.DuitkuClient.from_settings") as from_settings:
        yield from_settings.return_value


@pytest.fixture(autouse=True)
def rdash():
    with patch("orders.services.RdashClient.from_settings") as from_settings:
        yield from_settings.return_value


def run(*args):
    out = StringIO()
    call_command("check_pending_payments", *args, stdout=out)
    return out.getvalue()


@pytest.mark.django_db
class TestCheckPendingPayments:
    def test_full_pass(self, duitku):
        tx = TransactionFactory()
        duitku.check_status.return_value = StatusQueryResult.from_response(
            tx.merchant_order_id, {"statusCode": "02"}
        )

        output = run()

        assert "Checked 1, updated 1, failed 0" in output
        tx.refresh_from_db()
        assert tx.status == TransactionStatus.EXPIRED

    def test_single_transaction(self, duitku):
        tx = TransactionFactory()
        duitku.check_status.return_value = StatusQueryResult.from_response(
            tx.merchant_order_id, {"statusCode": "01"}
        )

        output = run("--merchant-order-id", tx.merchant_order_id)

        assert f"{tx.merchant_order_id}: pending -> pending" in output

    def test_single_transaction_gateway_error(self, duitku):
        duitku.check_status.side_effect = GatewayTimeoutError("Duitku API timed out")

        output = run("--merchant-order-id", "INV-1")

        assert "INV-1: Duitku API timed out" in output
