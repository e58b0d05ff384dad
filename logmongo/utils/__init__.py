"""
Utility module for logmongo.

Provides logging configuration and Basic-auth credential parsing.
"""

from logmongo.utils.logger_config import (
    DEBUG_CHANNELS,
    setup_logging,
    enable_debug_channels,
    parse_channels,
)
from logmongo.utils.basic_auth import (
    Credentials,
    parse_basic_auth,
)

__all__ = [
    "DEBUG_CHANNELS",
    "setup_logging",
    "enable_debug_channels",
    "parse_channels",
    "Credentials",
    "parse_basic_auth",
]
