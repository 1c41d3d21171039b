"""
Base error classes for teestream.

Provides a layered error hierarchy:
- TeeStreamError: Base class for all library errors
- SourceReadError: Upstream stream read failures
- SinkWriteError: A sink rejected or short-wrote a chunk
- TokenTooLarge: Tokenizer buffer exceeded its maximum without a token
- SplitFunctionError: A split function reported malformed input
- CoordinationError: Misuse of a barrier or run-once guard
- ConfigError: Invalid configuration values
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ErrorContext:
    """Structured error context for diagnostics."""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'source', 'sink', 'scanner')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class TeeStreamError(Exception):
    """Base class for all teestream errors.

    All errors from this library inherit from this class, making it easy
    to catch all library errors with a single except clause.

    Attributes:
        message: Human-readable error message
        context: Structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self, hint: str) -> TeeStreamError:
        """Add a hint to this error."""
        self.context.hint = hint
        self.args = (self._format_message(),)
        return self


class SourceReadError(TeeStreamError):
    """Error reading from the upstream stream.

    Raised when:
    - The wrapped stream's read raised a non-library exception
    - The stream repeatedly returned no data without reaching end-of-stream
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        cause: BaseException | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="source")
        super().__init__(message, ctx)
        self.__cause__ = cause


class SinkWriteError(TeeStreamError):
    """A sink rejected a chunk or accepted fewer bytes than given.

    The read that triggered the write fails as a whole; sinks later in the
    chain never see the chunk.

    Attributes:
        sink_index: Position of the failing sink in declaration order
        sink_name: Printable name of the failing sink
        expected: Number of bytes handed to the sink
        written: Number of bytes the sink reported (None if it raised)
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        sink_index: int | None = None,
        sink_name: str | None = None,
        expected: int | None = None,
        written: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="sink")
        if sink_index is not None:
            ctx.details["sink_index"] = sink_index
        if sink_name:
            ctx.details["sink_name"] = sink_name
        if expected is not None:
            ctx.details["expected"] = expected
        if written is not None:
            ctx.details["written"] = written
        super().__init__(message, ctx)
        self.sink_index = sink_index
        self.sink_name = sink_name
        self.expected = expected
        self.written = written
        self.__cause__ = cause

    @property
    def short_write(self) -> bool:
        """Whether the sink accepted only part of the chunk."""
        return (
            self.written is not None
            and self.expected is not None
            and self.written < self.expected
        )


class TokenTooLarge(TeeStreamError):
    """The tokenizer buffer reached its maximum without completing a token."""

    def __init__(
        self,
        message: str = "token too long",
        context: ErrorContext | None = None,
        *,
        limit: int | None = None,
        buffered: int | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="scanner")
        if limit is not None:
            ctx.details["limit"] = limit
        if buffered is not None:
            ctx.details["buffered"] = buffered
        super().__init__(message, ctx)
        self.limit = limit
        self.buffered = buffered


class SplitFunctionError(TeeStreamError):
    """A split function reported a malformed-input condition.

    Split functions may raise this directly. Any other exception they raise
    is wrapped in one, as are contract violations such as a negative
    advance or an advance past the end of the buffer.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        advance: int | None = None,
        buffered: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="split")
        if advance is not None:
            ctx.details["advance"] = advance
        if buffered is not None:
            ctx.details["buffered"] = buffered
        super().__init__(message, ctx)
        self.advance = advance
        self.buffered = buffered
        self.__cause__ = cause


class CoordinationError(TeeStreamError):
    """Misuse of a coordination primitive.

    Raised when a WaitGroup counter goes negative or a bounded wait
    elapses while registered tasks have not signalled completion.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        pending: int | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="sync")
        if pending is not None:
            ctx.details["pending"] = pending
        super().__init__(message, ctx)
        self.pending = pending


class ConfigError(TeeStreamError):
    """Invalid replication configuration."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        field: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="config")
        if field:
            ctx.details["field"] = field
        super().__init__(message, ctx)
        self.field = field
        self.__cause__ = cause
