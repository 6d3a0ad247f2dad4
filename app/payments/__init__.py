"""
Payments app for Duitku gateway reconciliation.

This app handles:
- Transaction records for gateway payment attempts
- Signed callback ingestion from Duitku
- Periodic status polling for pending transactions
- Applying payment results to orders and triggering fulfillment

Related apps:
    - orders: Order lifecycle and registry provisioning
    - audit: Append-only record of every applied transition

Usage:
    from payments.services import build_reconciliation_service
    from payments.state_machines import ReconciliationSource

    service = build_reconciliation_service()
    service.reconcile(callback, source=ReconciliationSource.WEBHOOK)
"""
