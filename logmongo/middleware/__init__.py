"""
logmongo middleware.

Provides the ASGI request logging middleware.
"""

from logmongo.middleware.request_logger import RequestLoggerMiddleware, SkipPredicate

__all__ = [
    "RequestLoggerMiddleware",
    "SkipPredicate",
]
