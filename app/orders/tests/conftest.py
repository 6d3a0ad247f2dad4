"""
Pytest fixtures for order model and API tests.
"""

import pytest
from rest_framework.test import APIClient

from orders.tests.factories import StaffUserFactory


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def operator(db):
    return StaffUserFactory(username="ops")


@pytest.fixture
def staff_client(api_client, operator):
    api_client.force_authenticate(user=operator)
    return api_client
