"""
logmongo - structured HTTP request logging into MongoDB

Compiles ``:token`` format templates into record builders and persists one
record per request from an ASGI middleware, without blocking the response.

Key Features:
- Extensible token registry (method, url, status, response-time, headers, ...)
- Named formats: default, short, tiny
- Fire-and-forget inserts with failure reporting
- Query adapter with filter/sort/limit/skip
"""

__version__ = "0.1.0"
__author__ = "logmongo contributors"

from logmongo.core import (
    Record,
    RecordBuilder,
    TokenRegistry,
    FormatCatalog,
    LifecycleTracker,
    RequestView,
    ResponseView,
    compile_format,
    create_default_registry,
    get_token_registry,
    get_format_catalog,
    register_token,
    define_format,
)
from logmongo.database import MongoSink, insert_records, find_records
from logmongo.middleware import RequestLoggerMiddleware

__all__ = [
    # Core
    "Record",
    "RecordBuilder",
    "TokenRegistry",
    "FormatCatalog",
    "LifecycleTracker",
    "RequestView",
    "ResponseView",
    "compile_format",
    "create_default_registry",
    "get_token_registry",
    "get_format_catalog",
    "register_token",
    "define_format",
    # Persistence
    "MongoSink",
    "insert_records",
    "find_records",
    # Middleware
    "RequestLoggerMiddleware",
]
