"""
External service adapters for the payments app.

- DuitkuClient: Payment gateway status API
"""

from payments.adapters.duitku_adapter import DuitkuClient

__all__ = [
    "DuitkuClient",
]
