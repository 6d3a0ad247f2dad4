"""
Run one status-poller pass synchronously.

Usage:
    python manage.py check_pending_payments
    python manage.py check_pending_payments --limit 20
    python manage.py check_pending_payments --merchant-order-id INV-20260401-0001
"""

from django.core.management.base import BaseCommand

from payments.exceptions import GatewayError
from payments.services import build_reconciliation_service


class Command(BaseCommand):
    help = "Check pending payment transactions against the gateway"

    def add_arguments(self, parser):
        parser.add_argument(
            "--merchant-order-id",
            help="Check a single transaction instead of every pending one",
        )
        parser.add_argument("--limit", type=int, default=None)

    def handle(self, *args, **opts):
        merchant_order_id = opts.get("merchant_order_id")
        with build_reconciliation_service() as service:
            if merchant_order_id:
                self._check_one(service, merchant_order_id)
            else:
                self._check_pending(service, opts["limit"])

    def _check_one(self, service, merchant_order_id: str) -> None:
        try:
            result = service.check_transaction(merchant_order_id)
        except GatewayError as e:
            self.stdout.write(self.style.WARNING(f"{merchant_order_id}: {e.message}"))
            return
        if not result.success:
            self.stdout.write(
                self.style.WARNING(f"{merchant_order_id}: {result.error}")
            )
            return
        outcome = result.data
        self.stdout.write(
            self.style.SUCCESS(
                f"{merchant_order_id}: {outcome.old_status} -> {outcome.new_status}"
            )
        )

    def _check_pending(self, service, limit: int | None) -> None:
        summary = service.poll_pending(limit=limit)
        self.stdout.write(
            self.style.SUCCESS(
                f"Checked {summary.checked}, updated {summary.updated}, "
                f"failed {summary.failed}"
            )
        )
