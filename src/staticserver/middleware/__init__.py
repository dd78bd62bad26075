"""
=============================================================================
MIDDLEWARE
=============================================================================

    Middleware, MiddlewarePipeline   composition (base.py)
    LoggingMiddleware                access log on "staticserver.access"

StaticMiddleware lives with the handler in staticserver.handlers.

=============================================================================
"""

from .base import (
    Middleware,
    MiddlewarePipeline,
    NextHandler,
)
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
]
