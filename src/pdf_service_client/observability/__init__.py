"""Observability helpers."""

from .logging import LogLevelError, get_logger, set_log_level

__all__ = ["LogLevelError", "get_logger", "set_log_level"]
