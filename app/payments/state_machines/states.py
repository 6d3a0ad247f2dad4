"""
State enums for payment models.

These are Django TextChoices for database storage and admin integration.

Transaction States:
    pending → success
    pending → failed
    pending → expired

Terminal states: SUCCESS, FAILED, EXPIRED. The first terminal value
written wins; later signals never overwrite it.
"""

from django.db import models


class TransactionStatus(models.TextChoices):
    """Lifecycle of a single gateway payment attempt."""

    PENDING = "pending", "Pending"
    SUCCESS = "success", "Success"
    FAILED = "failed", "Failed"
    EXPIRED = "expired", "Expired"

    @classmethod
    def terminal_values(cls) -> frozenset[str]:
        return frozenset({cls.SUCCESS, cls.FAILED, cls.EXPIRED})


class ReconciliationSource(models.TextChoices):
    """Entry point that delivered a payment signal."""

    WEBHOOK = "webhook", "Webhook"
    POLLER = "poller", "Poller"
