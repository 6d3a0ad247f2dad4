"""
State enums for payment models.
"""

from payments.state_machines.states import ReconciliationSource, TransactionStatus

__all__ = [
    "ReconciliationSource",
    "TransactionStatus",
]
