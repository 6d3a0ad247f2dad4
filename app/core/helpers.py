"""
Helper functions for HTTP request handling.

Usage:
    from core.helpers import get_client_ip

    ip = get_client_ip(request)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from django.http import HttpRequest


def get_client_ip(request: HttpRequest) -> str:
    """
    Extract client IP from request, handling proxies.

    The first address of X-Forwarded-For wins over REMOTE_ADDR.
    """
    x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "")
