"""
Transaction model for gateway payment attempts.

A Transaction is one payment session opened at the gateway for an
Order. It is created by the checkout flow and afterwards mutated only
by the reconciliation core, through a conditional update that only
matches rows still in PENDING.

Usage:
    from payments.models import Transaction
    from payments.state_machines import TransactionStatus

    tx = Transaction.objects.get(merchant_order_id="INV-20260401-0001")
    Transaction.objects.filter(
        pk=tx.pk, status=TransactionStatus.PENDING
    ).update(status=TransactionStatus.EXPIRED, ...)
"""

from __future__ import annotations

from django.db import models
from django.db.models import Q

from core.exceptions import ConflictError
from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.state_machines import TransactionStatus


class TransactionQuerySet(models.QuerySet):
    def pending(self):
        return self.filter(status=TransactionStatus.PENDING)


class Transaction(UUIDPrimaryKeyMixin, BaseModel):
    """
    One payment attempt at the gateway.

    Fields:
        merchant_order_id: Our reference sent to the gateway (unique, immutable)
        order: Order this payment pays for
        amount: Amount in minor currency units (IDR has no subunit)
        payment_method: Gateway payment method code (e.g. "VC", "BC")
        status: pending / success / failed / expired
        external_reference: Gateway-side reference
        status_code / status_message: Last raw gateway result
        expires_at: When the gateway session lapses
        paid_at: Capture time (set iff status is success)

    Invariants:
        Terminal statuses are never overwritten.
        Rows are never deleted.
    """

    merchant_order_id = models.CharField(
        max_length=100,
        unique=True,
        help_text="Merchant order id shared with the gateway",
    )

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="transactions",
        help_text="Order this transaction pays for",
    )

    amount = models.PositiveBigIntegerField(
        help_text="Amount in minor currency units",
    )

    payment_method = models.CharField(
        max_length=20,
        blank=True,
        help_text="Gateway payment method code",
    )

    status = models.CharField(
        max_length=20,
        choices=TransactionStatus.choices,
        default=TransactionStatus.PENDING,
        db_index=True,
    )

    external_reference = models.CharField(
        max_length=255,
        blank=True,
        help_text="Gateway reference for this payment",
    )

    status_code = models.CharField(
        max_length=10,
        blank=True,
        help_text="Last raw gateway result code",
    )

    status_message = models.CharField(
        max_length=255,
        blank=True,
        help_text="Last raw gateway status message",
    )

    expires_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    objects = TransactionQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Transaction"
        verbose_name_plural = "Transactions"
        indexes = [
            models.Index(
                fields=["status", "created_at"],
                name="tx_status_created_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(status=TransactionStatus.SUCCESS, paid_at__isnull=False)
                    | (~Q(status=TransactionStatus.SUCCESS) & Q(paid_at__isnull=True))
                ),
                name="tx_paid_at_iff_success",
            ),
        ]

    def __str__(self) -> str:
        return f"Transaction({self.merchant_order_id}, {self.status})"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_merchant_order_id = instance.__dict__.get("merchant_order_id")
        return instance

    @property
    def is_terminal(self) -> bool:
        return self.status in TransactionStatus.terminal_values()

    def save(self, *args, **kwargs):
        loaded = getattr(self, "_loaded_merchant_order_id", None)
        if loaded is not None and loaded != self.merchant_order_id:
            raise ConflictError(
                "merchant_order_id cannot be changed",
                error_code="MERCHANT_ORDER_ID_IMMUTABLE",
                details={"transaction_id": str(self.pk)},
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ConflictError(
            "Transactions cannot be deleted",
            error_code="TRANSACTION_UNDELETABLE",
            details={"transaction_id": str(self.pk)},
        )
