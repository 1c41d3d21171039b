"""
Error hierarchy for teestream.

Every error carries a structured ErrorContext; wrapped causes are chained
through ``__cause__``.
"""

from teestream.errors.base import (
    ConfigError,
    CoordinationError,
    ErrorContext,
    SinkWriteError,
    SourceReadError,
    SplitFunctionError,
    TeeStreamError,
    TokenTooLarge,
)

__all__ = [
    "ConfigError",
    "CoordinationError",
    "ErrorContext",
    "SinkWriteError",
    "SourceReadError",
    "SplitFunctionError",
    "TeeStreamError",
    "TokenTooLarge",
]
