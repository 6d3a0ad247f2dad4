"""
State enums for order models.

These are Django TextChoices for database storage and admin integration.
OrderStatus is driven through django-fsm transitions on Order.

Order States:
    pending → paid → processing → completed          (happy path)
    pending → processing → completed                 (manual provisioning)
    paid/processing → paid                           (provisioning failed)
    pending → cancelled                              (payment expired)

Terminal states: COMPLETED, CANCELLED
"""

from django.db import models


class OrderStatus(models.TextChoices):
    """
    Lifecycle of a domain order.

    PAID means payment was captured but provisioning has not succeeded
    yet. It is the safe fallback and never regresses to PENDING.
    """

    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    PAID = "paid", "Paid"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class OrderAction(models.TextChoices):
    """Registry operation requested by the order."""

    REGISTER = "register", "Register"
    RENEW = "renew", "Renew"
    TRANSFER = "transfer", "Transfer"


class FulfillmentSource(models.TextChoices):
    """What triggered a fulfillment attempt."""

    PAYMENT_WEBHOOK = "payment_webhook", "Payment Webhook"
    MANUAL = "manual", "Manual"
