"""
Best-effort audit logging.

AuditLogger is the single write path into the audit trail. A failed
write is logged locally and swallowed, so auditing can never fail the
payment or provisioning operation that triggered it.

Usage:
    from audit.services import Actor, AuditLogger

    audit = AuditLogger()

    # System-triggered action (webhook, poller)
    audit.record(
        action="transaction_status_changed",
        resource=f"transaction/{tx.merchant_order_id}",
        actor=Actor.system("webhook"),
        payload={"old_status": "pending", "new_status": "success"},
    )

    # Operator-triggered action
    audit.record(
        action="fulfill_order",
        resource=f"order/{order.pk}",
        actor=Actor.from_request(request),
        payload={"source": "manual", "rdash_success": False},
        status=AuditStatus.ERROR,
    )
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.db import transaction

from audit.models import AuditLog, AuditStatus
from core.helpers import get_client_ip

if TYPE_CHECKING:
    from typing import Any

    from django.http import HttpRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """
    Identity recorded on audit entries.

    Attributes:
        label: Human-readable actor ("system:poller", "alice")
        user_id: Primary key of the operator account, None for system actors
        ip_address: Source address of the request, if any
    """

    label: str
    user_id: int | None = None
    ip_address: str | None = None

    @classmethod
    def system(cls, source: str, ip_address: str | None = None) -> Actor:
        return cls(label=f"system:{source}", ip_address=ip_address)

    @classmethod
    def from_request(cls, request: HttpRequest) -> Actor:
        user = getattr(request, "user", None)
        ip_address = get_client_ip(request) or None
        if user is not None and user.is_authenticated:
            return cls(
                label=user.get_username(),
                user_id=user.pk,
                ip_address=ip_address,
            )
        return cls(label="anonymous", ip_address=ip_address)

    @property
    def is_system(self) -> bool:
        return self.user_id is None


class AuditLogger:
    """Append-only, never-raising writer for AuditLog rows."""

    def record(
        self,
        *,
        action: str,
        resource: str,
        actor: Actor | None = None,
        payload: dict[str, Any] | None = None,
        status: str = AuditStatus.SUCCESS,
    ) -> AuditLog | None:
        """
        Write one audit entry.

        The insert runs in its own savepoint so a failure does not break
        an enclosing transaction.

        Returns:
            The created AuditLog, or None if the write failed
        """
        actor = actor or Actor.system("unknown")
        try:
            with transaction.atomic():
                return AuditLog.objects.create(
                    actor_id=actor.user_id,
                    actor_label=actor.label,
                    ip_address=actor.ip_address,
                    action=action,
                    resource=resource,
                    payload=payload or {},
                    status=status,
                )
        except Exception:
            logger.exception(
                "Failed to write audit log",
                extra={
                    "action": action,
                    "resource": resource,
                    "actor": actor.label,
                    "audit_status": status,
                },
            )
            return None
