"""
AuditLog model for the append-only audit trail.

Every transaction status change, order cancellation and fulfillment
attempt writes one AuditLog row. Rows are never updated or deleted;
support staff read them through the admin and the operator API.

Usage:
    from audit.models import AuditLog, AuditStatus

    AuditLog.objects.filter(resource="order/42").order_by("created_at")
"""

from __future__ import annotations

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from core.exceptions import ConflictError
from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class AuditStatus(models.TextChoices):
    """Outcome recorded on an audit entry."""

    SUCCESS = "success", "Success"
    FAILURE = "failure", "Failure"
    ERROR = "error", "Error"


class AuditLog(UUIDPrimaryKeyMixin, BaseModel):
    """
    One append-only audit record.

    Fields:
        actor: Operator who triggered the action (null for system actors)
        actor_label: Display label, e.g. "system:payment_webhook" or a username
        ip_address: Source address of the triggering request, if any
        action: Machine-readable action name (e.g. "fulfill_order")
        resource: Affected resource, "<kind>/<id>" (e.g. "order/42")
        payload: Structured context for the action
        status: success / failure / error
    """

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
        help_text="User that triggered the action (null for system actors)",
    )

    actor_label = models.CharField(
        max_length=150,
        help_text="Actor display label (username or system:<source>)",
    )

    ip_address = models.GenericIPAddressField(
        null=True,
        blank=True,
        help_text="Source IP of the triggering request",
    )

    action = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Action name (e.g. 'fulfill_order', 'transaction_status_changed')",
    )

    resource = models.CharField(
        max_length=255,
        db_index=True,
        help_text="Affected resource as '<kind>/<id>'",
    )

    payload = models.JSONField(
        default=dict,
        blank=True,
        encoder=DjangoJSONEncoder,
        help_text="Structured context for the action",
    )

    status = models.CharField(
        max_length=20,
        choices=AuditStatus.choices,
        default=AuditStatus.SUCCESS,
        db_index=True,
        help_text="Outcome of the action",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Audit Log"
        verbose_name_plural = "Audit Logs"
        indexes = [
            models.Index(
                fields=["resource", "created_at"],
                name="audit_resource_created_idx",
            ),
            models.Index(
                fields=["action", "created_at"],
                name="audit_action_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"AuditLog({self.action}, {self.resource}, {self.status})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ConflictError(
                "Audit log entries are append-only",
                error_code="AUDIT_LOG_IMMUTABLE",
                details={"audit_log_id": str(self.pk)},
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ConflictError(
            "Audit log entries cannot be deleted",
            error_code="AUDIT_LOG_IMMUTABLE",
            details={"audit_log_id": str(self.pk)},
        )
