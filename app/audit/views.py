"""
Operator-facing audit log views.

Endpoints:
    GET /api/v1/audit/logs/       - List audit entries (filterable)
    GET /api/v1/audit/logs/{id}/  - Audit entry detail

Filtering:
    ?action=fulfill_order
    ?status=error
    ?resource=order/42
    ?resource_prefix=transaction/
    ?since=2026-01-01T00:00:00Z&until=...

Permissions:
    Staff accounts only. Raw provider errors are visible here and
    nowhere customer-facing.
"""

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import viewsets
from rest_framework.permissions import IsAdminUser

from audit.filters import AuditLogFilter
from audit.models import AuditLog
from audit.serializers import AuditLogSerializer


@extend_schema_view(
    list=extend_schema(
        operation_id="list_audit_logs",
        summary="List audit log entries",
        tags=["Audit"],
    ),
    retrieve=extend_schema(
        operation_id="get_audit_log",
        summary="Get audit log entry",
        tags=["Audit"],
    ),
)
class AuditLogViewSet(viewsets.ReadOnlyModelViewSet):
    """Read-only access to the audit trail for operators."""

    permission_classes = [IsAdminUser]
    serializer_class = AuditLogSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = AuditLogFilter

    def get_queryset(self):
        return AuditLog.objects.select_related("actor").order_by("-created_at")
