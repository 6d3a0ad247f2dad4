"""
Serializers for the operator-facing audit log API.
"""

from rest_framework import serializers

from audit.models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    """Read-only representation of an audit entry."""

    class Meta:
        model = AuditLog
        fields = [
            "id",
            "actor",
            "actor_label",
            "ip_address",
            "action",
            "resource",
            "payload",
            "status",
            "created_at",
        ]
        read_only_fields = fields
