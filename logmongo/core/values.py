"""
Token values and request records.

A token resolves to one of a closed set of value types; a record maps
placeholder keys to those values for a single request.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple, Union


# None means "absent"
TokenValue = Optional[Union[str, int, float, datetime]]


def to_token_value(value: Any) -> TokenValue:
    """
    Normalize a resolver result into a TokenValue.
    
    Args:
        value: Whatever a token resolver returned
    
    Returns:
        str, int, float, datetime or None
    """
    if value is None or isinstance(value, (str, int, float, datetime)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("latin-1")
    return str(value)


class Record(Mapping):
    """
    Immutable, ordered mapping of placeholder key to resolved value.
    
    Built once per request. Use ``to_document()`` to get a fresh dict
    for the store; the record itself is never handed to the driver.
    """
    
    __slots__ = ("_fields",)
    
    def __init__(self, fields: Iterable[Tuple[str, TokenValue]] = ()):
        self._fields: Dict[str, TokenValue] = dict(fields)
    
    def __getitem__(self, key: str) -> TokenValue:
        return self._fields[key]
    
    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)
    
    def __len__(self) -> int:
        return len(self._fields)
    
    def __repr__(self) -> str:
        return f"Record({self._fields!r})"
    
    @property
    def is_absent(self) -> bool:
        """True when no field carries a value (the empty record included)."""
        return all(value is None for value in self._fields.values())
    
    def to_document(self, omit_absent: bool = False) -> Dict[str, Any]:
        """
        Convert to a dictionary suitable for insertion.
        
        Args:
            omit_absent: Drop absent fields instead of storing them as null
        
        Returns:
            New dict in field order
        """
        if omit_absent:
            return {k: v for k, v in self._fields.items() if v is not None}
        return dict(self._fields)
