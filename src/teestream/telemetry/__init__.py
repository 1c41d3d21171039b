"""
Telemetry module for teestream.

Provides structured logging with pipeline-scoped context.
"""

from teestream.telemetry.logger import (
    JsonFormatter,
    LogContext,
    LogLevel,
    TeeStreamLogger,
    TextFormatter,
    clear_log_context,
    get_log_context,
    get_logger,
    log_context,
    set_log_context,
)

__all__ = [
    "JsonFormatter",
    "LogContext",
    "LogLevel",
    "TeeStreamLogger",
    "TextFormatter",
    "clear_log_context",
    "get_log_context",
    "get_logger",
    "log_context",
    "set_log_context",
]
