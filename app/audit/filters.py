import django_filters as filters

from audit.models import AuditLog


class AuditLogFilter(filters.FilterSet):
    resource = filters.CharFilter(field_name="resource", lookup_expr="exact")
    resource_prefix = filters.CharFilter(
        field_name="resource", lookup_expr="startswith"
    )
    since = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    until = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = AuditLog
        fields = ["action", "status", "resource", "resource_prefix", "since", "until"]
