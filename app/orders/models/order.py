"""
Order model for domain orders.

An Order records what the customer bought (register, renew or transfer
a domain) and tracks it from payment to provisioning. Status changes go
through django-fsm transitions; the fulfillment orchestrator and the
payment reconciliation service are the only writers.

Usage:
    from orders.models import Order
    from orders.state_machines import OrderStatus

    order = Order.objects.get(pk=order_id)
    order.mark_paid(reference="D1234", payment_method="VC")
    order.save()
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone
from django_fsm import FSMField, transition

from core.models import BaseModel
from orders.state_machines import OrderAction, OrderStatus

# States from which a provisioning attempt may start or finish.
PROVISIONABLE_STATES = [
    OrderStatus.PENDING,
    OrderStatus.PAID,
    OrderStatus.PROCESSING,
]


class Order(BaseModel):
    """
    A customer's domain order.

    Fields:
        user: Customer account that placed the order
        status: Lifecycle state (managed by FSM)
        action: Registry operation to perform
        domain_name: Fully qualified domain name
        registry_customer_id: Rdash customer id (register/transfer)
        registry_domain_id: Rdash domain id (required for renew)
        auth_code: EPP code (required for transfer)
        period: Registration period in years
        whois_protection: Whether to buy WHOIS privacy
        renew_current_date: Current expiry date sent with a renewal
        notes: Append-only human-readable history
        rdash_response / rdash_error: Last provisioning result

    Invariants:
        COMPLETED is terminal; fulfillment is never re-attempted.
        PAID never regresses to PENDING.
    """

    # ==========================================================================
    # Relationships
    # ==========================================================================

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
        help_text="Customer who placed the order",
    )

    # ==========================================================================
    # State
    # ==========================================================================

    status = FSMField(
        default=OrderStatus.PENDING,
        choices=OrderStatus.choices,
        db_index=True,
        help_text="Current state of the order (managed by FSM)",
    )

    # ==========================================================================
    # Requested Registry Operation
    # ==========================================================================

    action = models.CharField(
        max_length=20,
        choices=OrderAction.choices,
        blank=True,
        default=OrderAction.REGISTER,
        help_text="Registry operation to perform",
    )

    domain_name = models.CharField(
        max_length=253,
        blank=True,
        db_index=True,
        help_text="Fully qualified domain name",
    )

    registry_customer_id = models.PositiveBigIntegerField(
        null=True,
        blank=True,
        help_text="Rdash customer id that will own the domain",
    )

    registry_domain_id = models.PositiveBigIntegerField(
        null=True,
        blank=True,
        help_text="Rdash domain id (required for renewals)",
    )

    auth_code = models.CharField(
        max_length=255,
        blank=True,
        help_text="Transfer authorization (EPP) code",
    )

    period = models.PositiveSmallIntegerField(
        default=1,
        help_text="Registration period in years",
    )

    whois_protection = models.BooleanField(
        default=False,
        help_text="Buy WHOIS privacy protection",
    )

    renew_current_date = models.DateField(
        null=True,
        blank=True,
        help_text="Current expiry date sent to the registry on renewal",
    )

    # ==========================================================================
    # Payment Details
    # ==========================================================================

    gateway_reference = models.CharField(
        max_length=255,
        blank=True,
        help_text="Gateway reference of the payment that paid this order",
    )

    payment_method = models.CharField(
        max_length=20,
        blank=True,
        help_text="Gateway payment method code",
    )

    # ==========================================================================
    # Provisioning Result
    # ==========================================================================

    notes = models.TextField(
        blank=True,
        default="",
        help_text="Append-only history of payment and provisioning events",
    )

    rdash_response = models.JSONField(
        null=True,
        blank=True,
        help_text="Raw registry response of the last successful provisioning",
    )

    rdash_error = models.TextField(
        blank=True,
        default="",
        help_text="Registry error of the last failed provisioning",
    )

    # ==========================================================================
    # State Timestamps
    # ==========================================================================

    paid_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Order"
        verbose_name_plural = "Orders"
        indexes = [
            models.Index(
                fields=["status", "created_at"],
                name="order_status_created_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(period__gte=1),
                name="order_period_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"Order({self.pk}, {self.action} {self.domain_name}, {self.status})"

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def is_completed(self) -> bool:
        return self.status == OrderStatus.COMPLETED

    @property
    def is_cancelled(self) -> bool:
        return self.status == OrderStatus.CANCELLED

    # ==========================================================================
    # Notes
    # ==========================================================================

    def append_note(self, text: str) -> None:
        """
        Append a timestamped line to notes.

        Note: Does not save - caller must save after calling.
        """
        line = f"[{timezone.now().isoformat()}] {text}"
        self.notes = f"{self.notes}\n{line}" if self.notes else line

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=[OrderStatus.PENDING, OrderStatus.PROCESSING],
        target=OrderStatus.PAID,
    )
    def mark_paid(self, reference: str = "", payment_method: str = ""):
        """
        Record a captured payment.

        Transition: PENDING/PROCESSING -> PAID
        """
        self.paid_at = timezone.now()
        if reference:
            self.gateway_reference = reference
        if payment_method:
            self.payment_method = payment_method

    @transition(
        field=status,
        source=PROVISIONABLE_STATES,
        target=OrderStatus.PROCESSING,
    )
    def start_provisioning(self):
        """
        Mark a registry call as in flight.

        Transition: PENDING/PAID/PROCESSING -> PROCESSING
        """
        pass

    @transition(
        field=status,
        source=PROVISIONABLE_STATES,
        target=OrderStatus.COMPLETED,
    )
    def complete(self, registry_response: dict | None = None):
        """
        Record successful provisioning.

        Transition: PENDING/PAID/PROCESSING -> COMPLETED
        """
        self.completed_at = timezone.now()
        self.rdash_response = registry_response
        self.rdash_error = ""

    @transition(
        field=status,
        source=OrderStatus.PROCESSING,
        target=OrderStatus.PAID,
    )
    def fail_provisioning(self, error: str):
        """
        Record a failed provisioning attempt on a paid order.

        Transition: PROCESSING -> PAID

        The order stays paid-but-unprovisioned so an operator can retry.
        """
        self.rdash_error = error

    @transition(
        field=status,
        source=OrderStatus.PROCESSING,
        target=OrderStatus.PENDING,
    )
    def abandon_provisioning(self, error: str):
        """
        Record a failed provisioning attempt on an order nobody has paid for.

        Transition: PROCESSING -> PENDING

        The order stays open to payment and to payment expiry.
        """
        self.rdash_error = error

    @transition(
        field=status,
        source=OrderStatus.PENDING,
        target=OrderStatus.CANCELLED,
    )
    def cancel(self, reason: str = ""):
        """
        Cancel an unpaid order.

        Transition: PENDING -> CANCELLED
        """
        self.cancelled_at = timezone.now()
        if reason:
            self.append_note(reason)
