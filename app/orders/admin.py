"""
Orders admin configuration.

Status and provisioning results are read-only: they change only through
the fulfillment orchestrator and payment reconciliation.
"""

from django.contrib import admin

from orders.models import Domain, Order


class DomainInline(admin.TabularInline):
    model = Domain
    extra = 0
    can_delete = False
    fields = ["id", "name", "status", "expired_at", "synced_at"]
    readonly_fields = fields


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Admin configuration for Order.

    Provides visibility into payment and provisioning state.
    """

    list_display = [
        "id",
        "action",
        "domain_name",
        "status",
        "user",
        "paid_at",
        "completed_at",
        "created_at",
    ]
    list_filter = ["status", "action", "whois_protection"]
    search_fields = ["id", "domain_name", "gateway_reference", "user__username"]
    readonly_fields = [
        "status",
        "gateway_reference",
        "payment_method",
        "notes",
        "rdash_response",
        "rdash_error",
        "paid_at",
        "completed_at",
        "cancelled_at",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]
    inlines = [DomainInline]

    fieldsets = (
        (
            None,
            {
                "fields": ("user", "status", "action", "domain_name"),
            },
        ),
        (
            "Registry",
            {
                "fields": (
                    "registry_customer_id",
                    "registry_domain_id",
                    "auth_code",
                    "period",
                    "whois_protection",
                    "renew_current_date",
                ),
            },
        ),
        (
            "Payment",
            {
                "fields": ("gateway_reference", "payment_method", "paid_at"),
            },
        ),
        (
            "Provisioning",
            {
                "fields": (
                    "notes",
                    "rdash_response",
                    "rdash_error",
                    "completed_at",
                    "cancelled_at",
                ),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Domain)
class DomainAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "customer_id", "status", "expired_at", "synced_at"]
    list_filter = ["status"]
    search_fields = ["id", "name"]
    readonly_fields = ["id", "order", "synced_at", "created_at", "updated_at"]
    ordering = ["name"]
