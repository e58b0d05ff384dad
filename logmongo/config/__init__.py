"""
Configuration module for logmongo.

Provides environment-backed settings for the persistence target and middleware defaults.
"""

from logmongo.config.settings import Settings, get_settings, configure, reset_settings

__all__ = [
    "Settings",
    "get_settings",
    "configure",
    "reset_settings",
]
