"""
External service adapters for the orders app.

- RdashClient: Domain registry API (register, transfer, renew)
"""

from orders.adapters.rdash_adapter import RdashClient, RegistryResult

__all__ = [
    "RdashClient",
    "RegistryResult",
]
