"""
Orders app configuration.

Owns the commercial Order, the provisioned Domain record, the Rdash
registry client and the fulfillment orchestrator.
"""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    """Configuration for the orders application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
    verbose_name = "Orders"
