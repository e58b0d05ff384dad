"""
Core of logmongo: token registry, format compiler and format catalog.
"""

from logmongo.core.values import TokenValue, Record, to_token_value
from logmongo.core.lifecycle import TimingMark, LifecycleTracker, response_time_ms
from logmongo.core.exchange import RequestView, ResponseView
from logmongo.core.tokens import (
    TokenRegistry,
    BUILTIN_TOKENS,
    create_default_registry,
    get_token_registry,
    register_token,
)
from logmongo.core.compiler import (
    TOKEN_PATTERN,
    TokenRef,
    RecordBuilder,
    parse_format,
    compile_format,
)
from logmongo.core.formats import (
    BUILTIN_FORMATS,
    FormatCatalog,
    get_format_catalog,
    define_format,
)

__all__ = [
    # Values
    "TokenValue",
    "Record",
    "to_token_value",
    # Lifecycle
    "TimingMark",
    "LifecycleTracker",
    "response_time_ms",
    # Views
    "RequestView",
    "ResponseView",
    # Tokens
    "TokenRegistry",
    "BUILTIN_TOKENS",
    "create_default_registry",
    "get_token_registry",
    "register_token",
    # Compiler
    "TOKEN_PATTERN",
    "TokenRef",
    "RecordBuilder",
    "parse_format",
    "compile_format",
    # Formats
    "BUILTIN_FORMATS",
    "FormatCatalog",
    "get_format_catalog",
    "define_format",
]
