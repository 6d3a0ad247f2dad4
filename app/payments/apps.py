"""
Payments app configuration.

Owns gateway Transactions, callback ingestion, the status poller and
the reconciliation core that moves payment signals into order state.
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
