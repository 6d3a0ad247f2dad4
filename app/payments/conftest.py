"""
Pytest fixtures for payment tests.

Shared by every test package under payments/.
"""

import pytest

from payments.tests.factories import TEST_API_KEY, TEST_MERCHANT_CODE


@pytest.fixture(autouse=True)
def duitku_credentials(settings):
    """Sign and verify with known credentials in every payment test."""
    settings.DUITKU_MERCHANT_CODE = TEST_MERCHANT_CODE
    settings.DUITKU_API_KEY = TEST_API_KEY
    settings.DUITKU_BASE_URL = "https://sandbox.duitku.test/webapi/api/merchant"
    return settings
