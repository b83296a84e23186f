"""
=============================================================================
MIDDLEWARE
=============================================================================

Layers run around MediaHandler.handle for every parsed request.

LoggingMiddleware:
    Access log line per request (text or JSON) and an X-Request-ID
    response header.

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
]
