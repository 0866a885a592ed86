"""Shared logging utilities for consistent client observability.

Every client logger sits under the `pdf_service_client` namespace and writes
one line per record to stderr with a UTC timestamp. The starting level comes
from `PDF_CLIENT_LOG_LEVEL` (default INFO); `set_log_level` changes it for
every client logger at once.

Usage example:
    from pdf_service_client.observability.logging import get_logger, set_log_level

    logger = get_logger("pdf_service_client.infrastructure.http")
    logger.info("Retrying %s in %.2fs", url, delay)
    set_log_level("DEBUG")
"""

from __future__ import annotations

import logging
import os
import time

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
_LEVEL_ENV_VAR = "PDF_CLIENT_LOG_LEVEL"

_configured: dict[str, logging.Logger] = {}


class LogLevelError(ValueError):
    """Raised when a log level name is not one `logging` knows."""

    def __init__(self, level: str) -> None:
        super().__init__(f"Unknown log level: {level!r}.")


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise LogLevelError(level)
    return resolved


def get_logger(name: str) -> logging.Logger:
    """Return a standard logger configured for UTC timestamps.

    Args:
        name: Logger name (use a stable module-qualified name).

    Returns:
        A logger with a single stream handler and a consistent UTC format.

    Raises:
        LogLevelError: If `PDF_CLIENT_LOG_LEVEL` names an unknown level.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        level = _resolve_level(os.getenv(_LEVEL_ENV_VAR, "INFO"))
        handler = logging.StreamHandler()
        formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)
        formatter.converter = time.gmtime
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(level)
        logger.propagate = False
    _configured[name] = logger
    return logger


def set_log_level(level: str | int) -> None:
    """Apply `level` to every logger handed out by `get_logger`."""
    resolved = _resolve_level(level)
    for logger in _configured.values():
        logger.setLevel(resolved)
