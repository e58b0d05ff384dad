"""
Database module for logmongo.

Provides MongoDB adapters for writing and reading request records.
"""

from logmongo.database.mongodb import (
    DEFAULT_QUERY_LIMIT,
    DEFAULT_QUERY_SKIP,
    MongoSink,
    insert_records,
    find_records,
)

__all__ = [
    "DEFAULT_QUERY_LIMIT",
    "DEFAULT_QUERY_SKIP",
    "MongoSink",
    "insert_records",
    "find_records",
]
