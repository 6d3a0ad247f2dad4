"""
Audit admin configuration.

Entries are view-only: no add, change or delete from the admin.
"""

from django.contrib import admin

from audit.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ["created_at", "action", "resource", "status", "actor_label"]
    list_filter = ["action", "status"]
    search_fields = ["resource", "actor_label"]
    readonly_fields = [
        "id",
        "actor",
        "actor_label",
        "ip_address",
        "action",
        "resource",
        "payload",
        "status",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
