"""
Audit app configuration.

Append-only audit trail of payment transitions and provisioning attempts,
exposed read-only to operators.
"""

from django.apps import AppConfig


class AuditConfig(AppConfig):
    """Configuration for the audit application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "audit"
    verbose_name = "Audit Log"
