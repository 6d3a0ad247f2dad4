"""
Payment admin configuration.

Transactions are read-only: status and gateway fields change only
through payment reconciliation, and rows are never deleted.
"""

from django.contrib import admin

from payments.models import Transaction


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """
    Admin configuration for Transaction.

    Provides visibility into gateway payment state per order.
    """

    list_display = [
        "merchant_order_id",
        "order",
        "amount",
        "payment_method",
        "status",
        "status_code",
        "paid_at",
        "created_at",
    ]
    list_filter = ["status", "payment_method"]
    search_fields = ["merchant_order_id", "external_reference", "order__domain_name"]
    readonly_fields = [
        "id",
        "merchant_order_id",
        "order",
        "amount",
        "payment_method",
        "status",
        "external_reference",
        "status_code",
        "status_message",
        "expires_at",
        "paid_at",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
