"""
Tests for DuitkuClient.

Tests cover:
- Signed request body and timeout
- Response normalization into StatusQueryResult
- Error translation for timeouts, connection errors, 5xx, 4xx and bad bodies
"""

import json
from unittest.mock import MagicMock

import pytest
import requests

from payments.adapters import DuitkuClient
from payments.exceptions import (
    GatewayResponseError,
    GatewayTimeoutError,
    GatewayUnavailableError,
)
from payments.signatures import SignatureVerifier, status_query_signature

BASE_URL = "https://sandbox.duitku.test/webapi/api/merchant"


def make_response(status_code=200, body=None, text=None):
    response = requests.Response()
    response.status_code = status_code
    if text is not None:
        response._content = text.encode()
    else:
        response._content = json.dumps(body or {}).encode()
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session):
    return DuitkuClient(
        base_url=BASE_URL,
        signer=SignatureVerifier(merchant_code="D0001", api_key="secret"),
        timeout=15,
        session=session,
    )


class TestCheckStatus:
    def test_posts_signed_status_query(self, client, session):
        session.post.return_value = make_response(
            body={"merchantOrderId": "INV-1", "statusCode": "01"}
        )

        client.check_status("INV-1")

        session.post.assert_called_once_with(
            f"{BASE_URL}/transactionStatus",
            json={
                "merchantCode": "D0001",
                "merchantOrderId": "INV-1",
                "signature": status_query_signature("D0001", "INV-1", "secret"),
            },
            timeout=15,
        )

    def test_returns_status_query_result(self, client, session):
        session.post.return_value = make_response(
            body={
                "merchantOrderId": "INV-1",
                "reference": "DK123",
                "amount": "150000",
                "statusCode": "00",
                "statusMessage": "SUCCESS",
            }
        )

        result = client.check_status("INV-1")

        assert result.kind == "status_query"
        assert result.result_code == "00"
        assert result.reference == "DK123"
        assert result.amount == 150000


class TestErrors:
    def test_timeout_is_retryable(self, client, session):
        session.post.side_effect = requests.Timeout()

        with pytest.raises(GatewayTimeoutError) as exc_info:
            client.check_status("INV-1")

        assert exc_info.value.is_retryable

    def test_connection_error_is_retryable(self, client, session):
        session.post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(GatewayUnavailableError):
            client.check_status("INV-1")

    def test_server_error_is_retryable(self, client, session):
        session.post.return_value = make_response(502, text="Bad Gateway")

        with pytest.raises(GatewayUnavailableError) as exc_info:
            client.check_status("INV-1")

        assert exc_info.value.status_code == 502

    def test_client_error_is_not_retryable(self, client, session):
        session.post.return_value = make_response(
            401, body={"Message": "Wrong signature"}
        )

        with pytest.raises(GatewayResponseError) as exc_info:
            client.check_status("INV-1")

        assert not exc_info.value.is_retryable
        assert exc_info.value.message == "Duitku API error: 401"

    def test_non_json_body(self, client, session):
        session.post.return_value = make_response(200, text="<html>")

        with pytest.raises(GatewayResponseError):
            client.check_status("INV-1")


class TestFromSettings:
    def test_uses_configured_credentials(self, settings):
        settings.DUITKU_MERCHANT_CODE = "D7777"
        settings.DUITKU_API_KEY = "k"
        settings.DUITKU_API_TIMEOUT_SECONDS = 5

        client = DuitkuClient.from_settings()

        assert client.signer.merchant_code == "D7777"
        assert client.timeout == 5


class TestLifecycle:
    def test_close_releases_session(self, client, session):
        client.close()

        session.close.assert_called_once_with()
