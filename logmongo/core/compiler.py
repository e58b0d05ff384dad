"""
Format template compiler.

Turns a template such as ``":date :method :url :status"`` into a
RecordBuilder. The template is parsed once into an ordered list of token
references; the builder walks that list per request and asks the registry
for each value. Literal text between placeholders only serves as
separation and is not kept.
"""

import re
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from logmongo.core.exchange import RequestView, ResponseView
from logmongo.core.values import Record

# :name or :name[arg]; names are two or more word characters or hyphens
TOKEN_PATTERN = re.compile(r":([-\w]{2,})(?:\[([^\]]+)\])?")


@dataclass(frozen=True)
class TokenRef:
    """One placeholder occurrence."""

    name: str
    arg: Optional[str] = None

    @property
    def key(self) -> str:
        """Record key: the placeholder text without the leading colon."""
        if self.arg is None:
            return self.name
        return f"{self.name}[{self.arg}]"


def iter_placeholders(fmt: str) -> Iterator[TokenRef]:
    """Yield every placeholder in ``fmt`` in order of appearance."""
    for match in TOKEN_PATTERN.finditer(fmt):
        yield TokenRef(name=match.group(1), arg=match.group(2))


def parse_format(fmt: str) -> Tuple[TokenRef, ...]:
    """
    Parse a template into its distinct token references.

    A placeholder repeated with the same key keeps its first position
    and is evaluated once.

    Args:
        fmt: Format template

    Returns:
        Token references in order of first appearance
    """
    seen = {}
    for ref in iter_placeholders(fmt):
        seen.setdefault(ref.key, ref)
    return tuple(seen.values())


class RecordBuilder:
    """
    Compiled format.

    Call with ``(registry, request, response)`` to get a Record. Builders
    hold no per-request state and are meant to be built once and reused.
    """

    __slots__ = ("fields", "source")

    def __init__(self, fields: Tuple[TokenRef, ...], source: Optional[str] = None):
        self.fields = tuple(fields)
        self.source = source

    @property
    def keys(self) -> Tuple[str, ...]:
        return tuple(ref.key for ref in self.fields)

    def __call__(self, registry, request: RequestView, response: ResponseView) -> Record:
        return Record(
            (ref.key, registry.resolve(ref.name, request, response, ref.arg))
            for ref in self.fields
        )

    def __repr__(self) -> str:
        return f"RecordBuilder({self.source!r})"


def compile_format(fmt: str) -> RecordBuilder:
    """
    Compile a format template into a RecordBuilder.

    Token names are not checked against any registry here; names that
    are still unknown at evaluation time resolve to None.

    Args:
        fmt: Format template

    Returns:
        RecordBuilder

    Raises:
        TypeError: If fmt is not a string
        ValueError: If fmt is empty
    """
    if not isinstance(fmt, str):
        raise TypeError("argument format must be a string")
    if not fmt:
        raise ValueError("argument format must not be empty")

    return RecordBuilder(parse_format(fmt), source=fmt)
