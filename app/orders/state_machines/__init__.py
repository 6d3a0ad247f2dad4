"""
Order state machine definitions.

Usage:
    from orders.state_machines import OrderStatus, OrderAction
"""

from orders.state_machines.states import FulfillmentSource, OrderAction, OrderStatus

__all__ = [
    "FulfillmentSource",
    "OrderAction",
    "OrderStatus",
]
