"""
Order domain models.

- Order: Commercial order tracked from payment to provisioning
- Domain: Registry domain written after successful provisioning
"""

from orders.models.domain import Domain
from orders.models.order import Order

__all__ = [
    "Domain",
    "Order",
]
