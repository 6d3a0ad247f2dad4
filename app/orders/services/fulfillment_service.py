"""
Fulfillment orchestrator: provisions a paid order at the registry.

FulfillmentService is invoked from two places:
- ReconciliationService, right after a payment is confirmed
  (source=payment_webhook, system actor)
- ProvisionOrderView, when an operator retries provisioning
  (source=manual, operator actor)

Flow:
    1. Load the order. Completed orders are a successful no-op and
       cancelled orders are refused, in both cases with no registry call.
    2. Validate the fields the order's action needs.
    3. Move the order to PROCESSING and call the registry.
    4. On success, upsert the Domain record (register/transfer) and
       complete the order.
    5. On any registry failure, record the error and move the order
       back: to PAID when it has been paid for, otherwise to PENDING so
       payment expiry can still cancel it. There is no automatic retry.

Every outcome appends a timestamped note to the order and writes an
audit entry "fulfill_order" for resource "order/<id>".

Usage:
    from orders.services import build_fulfillment_service
    from orders.state_machines import FulfillmentSource

    service = build_fulfillment_service()
    result = service.fulfill(
        order_id,
        actor=Actor.system(FulfillmentSource.PAYMENT_WEBHOOK),
        source=FulfillmentSource.PAYMENT_WEBHOOK,
    )
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

from audit.models import AuditStatus
from audit.services import Actor
from core.services import BaseService, ServiceResult
from orders.exceptions import (
    MissingRegistryDomainIdError,
    OrderCancelledError,
    OrderNotActionableError,
    OrderNotFoundError,
    RegistryError,
)
from orders.models import Domain, Order
from orders.state_machines import FulfillmentSource, OrderAction, OrderStatus

if TYPE_CHECKING:
    from typing import Any

    from audit.services import AuditLogger
    from orders.adapters import RdashClient, RegistryResult


@dataclass
class FulfillmentOutcome:
    """
    What happened to an order during one fulfillment attempt.

    Attributes:
        order_id: Order primary key
        status: Order status after the attempt
        rdash_success: Whether the registry accepted the request
        message: Human-readable summary
        already_completed: True when the attempt was a no-op
        domain_id: Registry domain id written to the Domain table, if any
    """

    order_id: int
    status: str
    rdash_success: bool
    message: str
    already_completed: bool = False
    domain_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class FulfillmentService(BaseService):
    """Drives a single order through the registry provisioning call."""

    def __init__(self, registry: RdashClient, audit: AuditLogger):
        self.registry = registry
        self.audit = audit

    def close(self) -> None:
        self.registry.close()

    def __enter__(self) -> FulfillmentService:
        return self

    def __exit__(self, *exc_info) -> bool:
        self.close()
        return False

    def fulfill(
        self,
        order_id: int,
        *,
        actor: Actor | None = None,
        source: str = FulfillmentSource.MANUAL,
    ) -> ServiceResult[FulfillmentOutcome]:
        """
        Provision the order at the registry.

        Args:
            order_id: Order primary key
            actor: Who triggered the attempt (defaults to a system actor)
            source: FulfillmentSource value recorded in the audit payload

        Returns:
            ServiceResult with a FulfillmentOutcome. Failures carry an
            error_code of ORDER_NOT_FOUND, ORDER_CANCELLED,
            ORDER_NOT_ACTIONABLE, MISSING_REGISTRY_DOMAIN_ID or
            PROVISIONING_FAILED.
        """
        actor = actor or Actor.system(source)
        log = self.get_logger()

        order = Order.objects.filter(pk=order_id).first()
        if order is None:
            log.warning(
                "Fulfillment requested for unknown order",
                extra={"order_id": order_id},
            )
            return ServiceResult.from_exception(
                OrderNotFoundError(
                    f"Order {order_id} not found",
                    details={"order_id": order_id},
                )
            )

        if order.is_completed:
            log.info(
                "Order already completed, skipping provisioning",
                extra={"order_id": order.pk, "source": source},
            )
            outcome = self._outcome(
                order, rdash_success=True, message="Order already completed"
            )
            outcome.already_completed = True
            self._audit(order, actor, source, outcome, AuditStatus.SUCCESS)
            return ServiceResult.success(outcome)

        if order.is_cancelled:
            error = OrderCancelledError(
                f"Order {order.pk} is cancelled",
                details={"order_id": order.pk},
            )
            outcome = self._outcome(order, rdash_success=False, message=error.message)
            self._audit(order, actor, source, outcome, AuditStatus.FAILURE)
            return ServiceResult.failure(
                error.message, error_code=error.error_code, data=outcome
            )

        try:
            self._validate(order)
        except (OrderNotActionableError, MissingRegistryDomainIdError) as e:
            log.warning(
                "Order cannot be provisioned",
                extra={"order_id": order.pk, "error_code": e.error_code},
            )
            order.append_note(f"Provisioning: Failed - {e.message}")
            order.save(update_fields=["notes", "updated_at"])
            outcome = self._outcome(order, rdash_success=False, message=e.message)
            self._audit(order, actor, source, outcome, AuditStatus.FAILURE)
            return ServiceResult.failure(
                e.message, error_code=e.error_code, data=outcome
            )

        started_from = order.status
        order.start_provisioning()
        order.save()

        log.info(
            "Provisioning order at registry",
            extra={
                "order_id": order.pk,
                "action": order.action,
                "domain_name": order.domain_name,
                "source": source,
            },
        )

        try:
            result = self._dispatch(order)
        except RegistryError as e:
            return self._record_failure(order, actor, source, e, started_from)

        return self._record_success(order, actor, source, result)

    # =========================================================================
    # Steps
    # =========================================================================

    @staticmethod
    def _validate(order: Order) -> None:
        missing: list[str] = []
        if not order.action:
            missing.append("action")

        if order.action == OrderAction.RENEW:
            if not order.registry_domain_id:
                raise MissingRegistryDomainIdError(
                    "Renewal requires the registry domain id",
                    details={"order_id": order.pk},
                )
        else:
            if not order.domain_name:
                missing.append("domain_name")
            if not order.registry_customer_id:
                missing.append("registry_customer_id")
            if order.action == OrderAction.TRANSFER and not order.auth_code:
                missing.append("auth_code")

        if missing:
            raise OrderNotActionableError(
                f"Order is missing required fields: {', '.join(missing)}",
                details={"order_id": order.pk, "missing": missing},
            )

    def _dispatch(self, order: Order) -> RegistryResult:
        if order.action == OrderAction.RENEW:
            return self.registry.renew_domain(
                order.registry_domain_id,
                period=order.period,
                current_date=order.renew_current_date,
                whois_protection=order.whois_protection,
            )
        if order.action == OrderAction.TRANSFER:
            return self.registry.transfer_domain(
                domain=order.domain_name,
                customer_id=order.registry_customer_id,
                auth_code=order.auth_code,
                period=order.period,
                whois_protection=order.whois_protection,
            )
        return self.registry.register_domain(
            name=order.domain_name,
            customer_id=order.registry_customer_id,
            period=order.period,
            whois_protection=order.whois_protection,
        )

    def _record_success(
        self,
        order: Order,
        actor: Actor,
        source: str,
        result: RegistryResult,
    ) -> ServiceResult[FulfillmentOutcome]:
        domain = None
        with self.atomic():
            if order.action in (OrderAction.REGISTER, OrderAction.TRANSFER):
                domain = Domain.upsert_from_registry(result.data, order)
            order.complete(result.raw)
            order.append_note("Provisioning: Success")
            order.save()

        self.get_logger().info(
            "Order provisioned",
            extra={"order_id": order.pk, "action": order.action, "source": source},
        )
        outcome = self._outcome(
            order,
            rdash_success=True,
            message=result.message or "Provisioning succeeded",
        )
        outcome.domain_id = domain.id if domain else None
        self._audit(order, actor, source, outcome, AuditStatus.SUCCESS)
        return ServiceResult.success(outcome)

    def _record_failure(
        self,
        order: Order,
        actor: Actor,
        source: str,
        error: RegistryError,
        started_from: str,
    ) -> ServiceResult[FulfillmentOutcome]:
        if started_from == OrderStatus.PENDING and not self._payment_landed(order):
            order.abandon_provisioning(error.message)
        else:
            order.fail_provisioning(error.message)
        order.append_note(f"Provisioning: Failed - {error.message}")
        order.save()

        self.get_logger().warning(
            "Registry provisioning failed",
            extra={
                "order_id": order.pk,
                "error_code": error.error_code,
                "retryable": error.is_retryable,
                "source": source,
            },
        )
        outcome = self._outcome(order, rdash_success=False, message=error.message)
        self._audit(
            order,
            actor,
            source,
            outcome,
            AuditStatus.ERROR if error.is_retryable else AuditStatus.FAILURE,
        )
        return ServiceResult.failure(
            f"Rdash Provisioning Failed: {error.message}",
            error_code="PROVISIONING_FAILED",
            data=outcome,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _payment_landed(order: Order) -> bool:
        """Reload payment fields if a payment was recorded mid-attempt."""
        paid = (
            Order.objects.filter(pk=order.pk, paid_at__isnull=False)
            .values("paid_at", "gateway_reference", "payment_method")
            .first()
        )
        if paid is None:
            return False
        for field, value in paid.items():
            setattr(order, field, value)
        return True

    @staticmethod
    def _outcome(
        order: Order, *, rdash_success: bool, message: str
    ) -> FulfillmentOutcome:
        return FulfillmentOutcome(
            order_id=order.pk,
            status=order.status,
            rdash_success=rdash_success,
            message=message,
        )

    def _audit(
        self,
        order: Order,
        actor: Actor,
        source: str,
        outcome: FulfillmentOutcome,
        status: str,
    ) -> None:
        self.audit.record(
            action="fulfill_order",
            resource=f"order/{order.pk}",
            actor=actor,
            payload={
                "source": str(source),
                "rdash_success": outcome.rdash_success,
                "message": outcome.message,
            },
            status=status,
        )
