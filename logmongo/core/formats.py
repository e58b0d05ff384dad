"""
Named format catalog.

Maps short names to format templates or ready-made builders and
compiles each distinct template at most once.
"""

import logging
from typing import Callable, Dict, List, Optional, Union

from logmongo.core.compiler import RecordBuilder, compile_format

logger = logging.getLogger(__name__)


FormatSpec = Union[str, Callable]


# =============================================================================
# Built-in formats
# =============================================================================

DEFAULT_FORMAT = (
    ":date :method :url :status :remote-addr :response-time :http-version "
    ":remote-user :res[content-length] :referrer :user-agent"
)

SHORT_FORMAT = (
    ":remote-addr :remote-user :method :url :http-version :status "
    ":res[content-length] :response-time"
)

TINY_FORMAT = ":method :url :status :res[content-length] :response-time"

BUILTIN_FORMATS: Dict[str, str] = {
    "default": DEFAULT_FORMAT,
    "short": SHORT_FORMAT,
    "tiny": TINY_FORMAT,
}


class FormatCatalog:
    """
    Named formats plus a cache of compiled templates.

    Like the token registry, definitions are meant to happen at startup.
    """

    def __init__(
        self,
        formats: Optional[Dict[str, FormatSpec]] = None,
        default: str = "default",
    ):
        """
        Initialize catalog.

        Args:
            formats: Initial named formats (built-ins when omitted)
            default: Name used when a lookup cannot be resolved
        """
        self._formats: Dict[str, FormatSpec] = dict(
            BUILTIN_FORMATS if formats is None else formats
        )
        self._compiled: Dict[str, RecordBuilder] = {}
        self.default = default

    def define(self, name: str, fmt: FormatSpec) -> "FormatCatalog":
        """Register a named format, silently replacing any previous one."""
        if not isinstance(fmt, str) and not callable(fmt):
            raise TypeError(f"format '{name}' must be a template string or a callable")
        self._formats[name] = fmt
        return self

    def get(self, name: str) -> Optional[FormatSpec]:
        return self._formats.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._formats

    def names(self) -> List[str]:
        return list(self._formats)

    def compile(self, template: str) -> RecordBuilder:
        """Compile ``template``, reusing an earlier compilation."""
        builder = self._compiled.get(template)
        if builder is None:
            builder = compile_format(template)
            self._compiled[template] = builder
            logger.debug(f"Compiled format {template!r} into {len(builder.fields)} fields")
        return builder

    def lookup(self, fmt: Optional[FormatSpec] = None) -> Callable:
        """
        Resolve a format spec into a builder.

        A callable is returned as-is. A string is looked up by name
        first and otherwise treated as a raw template. An empty or
        missing spec falls back to the default format.

        Args:
            fmt: Format name, template or builder

        Returns:
            Callable taking (registry, request, response)
        """
        if callable(fmt):
            return fmt

        if fmt is not None and not isinstance(fmt, str):
            raise TypeError("argument format must be a string or a callable")

        entry = self._formats.get(fmt) if fmt else None
        if entry is None:
            entry = fmt or self._formats.get(self.default)
        if entry is None:
            raise ValueError(f"default format '{self.default}' is not defined")

        if callable(entry):
            return entry
        return self.compile(entry)


# Global catalog instance
_catalog: Optional[FormatCatalog] = None


def get_format_catalog() -> FormatCatalog:
    """Get or create the process-wide format catalog."""
    global _catalog
    if _catalog is None:
        _catalog = FormatCatalog()
    return _catalog


def define_format(name: str, fmt: FormatSpec) -> FormatCatalog:
    """Define a named format on the process-wide catalog."""
    return get_format_catalog().define(name, fmt)
