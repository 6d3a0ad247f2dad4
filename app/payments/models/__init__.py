"""
Payment domain models.

- Transaction: One gateway payment attempt for an Order
"""

from payments.models.transaction import Transaction

__all__ = [
    "Transaction",
]
