"""
View decorators for cross-cutting concerns.

Usage:
    from core.decorators import log_request

    @log_request()
    def gateway_callback(request):
        ...
"""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


def log_request(logger_name: str | None = None):
    """
    Log request method, path and response status at DEBUG level.

    Args:
        logger_name: Optional logger name (defaults to view module)
    """

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(request, *args, **kwargs):
            log = logging.getLogger(logger_name or func.__module__)

            log.debug(
                f"Request: {request.method} {request.path}",
                extra={
                    "method": request.method,
                    "path": request.path,
                    "content_type": request.content_type,
                },
            )

            response = func(request, *args, **kwargs)

            status_code = getattr(response, "status_code", "unknown")
            log.debug(
                f"Response: {status_code} for {request.method} {request.path}",
                extra={
                    "status_code": status_code,
                    "method": request.method,
                    "path": request.path,
                },
            )
            return response

        return wrapper

    return decorator
