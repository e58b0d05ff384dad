"""
Logging configuration for logmongo.

The package logs under ``logmongo.*``. These channels carry DEBUG
diagnostics:

- ``middleware``: skip request / skip line / log request decisions
- ``database``: completed inserts
- ``core``: compiled formats and token overrides

Those channels can be opened individually without lowering the level of
everything else.
"""

import logging
import sys
from typing import Iterable, Optional

ROOT_LOGGER = "logmongo"

DEBUG_CHANNELS = {
    "middleware": "logmongo.middleware",
    "database": "logmongo.database",
    "core": "logmongo.core",
}


def setup_logging(
    level: str = "INFO",
    format_string: str = None,
    log_file: str = None,
    debug_channels: Iterable[str] = (),
) -> logging.Logger:
    """
    Set up the ``logmongo`` logger tree.

    Args:
        level: Level for the package as a whole
        format_string: Log message format
        log_file: Optional file to write logs to
        debug_channels: Channel names (see DEBUG_CHANNELS) logged at DEBUG

    Returns:
        Root logmongo logger
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    package_logger = logging.getLogger(ROOT_LOGGER)
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    package_logger.handlers = []

    # Handlers stay at NOTSET; logger levels decide what gets through
    formatter = logging.Formatter(format_string)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    for name in DEBUG_CHANNELS:
        logging.getLogger(DEBUG_CHANNELS[name]).setLevel(logging.NOTSET)
    enable_debug_channels(debug_channels)

    return package_logger


def enable_debug_channels(channels: Iterable[str]) -> None:
    """
    Log the given channels at DEBUG.

    Raises:
        ValueError: for a name that is not in DEBUG_CHANNELS
    """
    for name in channels:
        logger_name = DEBUG_CHANNELS.get(name.strip().lower())
        if logger_name is None:
            raise ValueError(
                f"unknown debug channel '{name}', expected one of {sorted(DEBUG_CHANNELS)}"
            )
        logging.getLogger(logger_name).setLevel(logging.DEBUG)


def parse_channels(value: Optional[str]) -> list:
    """Split a comma-separated channel list such as ``"middleware,database"``."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]
