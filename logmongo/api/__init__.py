"""
logmongo API layer.

Provides a small REST API for querying stored request records.
"""

from logmongo.api.main import create_app

__all__ = ["create_app"]
