"""
Buffered tokenizer over a Stream.

The Tokenizer reads from its stream on demand, keeps unconsumed bytes in a
growable buffer and hands them to a split function that decides where
tokens begin and end. It is a lazy, forward-only iterator: once exhausted
or failed it yields nothing more.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from teestream.errors import SplitFunctionError, TeeStreamError, TokenTooLarge
from teestream.scan.split import scan_lines
from teestream.stream.base import read_chunk

if TYPE_CHECKING:
    from collections.abc import Iterator

    from teestream.pipeline.config import ReplicationConfig
    from teestream.scan.split import SplitFunc
    from teestream.stream.base import Stream

#: Default maximum size of a single token (matches bufio.MaxScanTokenSize).
MAX_TOKEN_SIZE = 64 * 1024

#: Size of the first buffer allocation.
INITIAL_BUFFER_SIZE = 4096

#: Consecutive empty tokens without progress tolerated at end-of-stream.
MAX_EMPTY_TOKENS = 100


class ScannerState(str, Enum):
    """Tokenizer states."""

    NEED_MORE_INPUT = "need_more_input"
    TOKEN_READY = "token_ready"
    DONE = "done"


class Tokenizer:
    """Split a stream into tokens using a pluggable split function.

    Iterating yields ``bytes`` tokens. Errors end the sequence:

    - TokenTooLarge when the buffer is at ``max_token_size`` and the split
      function still needs more input
    - SplitFunctionError when the split function raises or violates its
      contract
    - SourceReadError when the stream fails (library errors raised by the
      stream, such as SinkWriteError from a Duplicator, pass through)

    Example:
        >>> tokens = Tokenizer(BytesStream(b"hoge fuga\\nfoo bar"), scan_words)
        >>> [t.decode() for t in tokens]
        ['hoge', 'fuga', 'foo', 'bar']
    """

    def __init__(
        self,
        stream: Stream,
        split: SplitFunc = scan_lines,
        *,
        initial_buffer_size: int = INITIAL_BUFFER_SIZE,
        max_token_size: int = MAX_TOKEN_SIZE,
        max_empty_tokens: int = MAX_EMPTY_TOKENS,
    ) -> None:
        """Initialize the tokenizer.

        Args:
            stream: Stream to tokenize (may be the head of a Duplicator chain)
            split: Split function deciding token boundaries
            initial_buffer_size: First buffer allocation in bytes
            max_token_size: Largest buffer, and so largest token, allowed
            max_empty_tokens: Consecutive empty tokens tolerated at end-of-stream
        """
        self._stream = stream
        self._split = split
        self._empty_limit = max_empty_tokens
        self._set_buffer(initial_buffer_size, max_token_size)

        self._buf = bytearray()
        self._start = 0
        self._eof = False
        self._empties = 0
        self._started = False
        self._state = ScannerState.NEED_MORE_INPUT

        self.tokens_yielded = 0
        self.bytes_read = 0

    @classmethod
    def from_config(
        cls,
        stream: Stream,
        config: ReplicationConfig,
        split: SplitFunc | None = None,
    ) -> Tokenizer:
        """Create a tokenizer using buffer limits and split from a config."""
        return cls(
            stream,
            split or config.split_function(),
            initial_buffer_size=config.initial_buffer_size,
            max_token_size=config.max_token_size,
            max_empty_tokens=config.max_empty_tokens,
        )

    def _set_buffer(self, initial: int, maximum: int) -> None:
        if initial <= 0 or maximum <= 0:
            raise ValueError("buffer sizes must be positive")
        self._capacity = min(initial, maximum)
        self._max_token_size = maximum

    def split(self, fn: SplitFunc) -> None:
        """Replace the split function. Only allowed before iteration starts."""
        if self._started:
            raise RuntimeError("split function set after scanning started")
        self._split = fn

    def buffer(self, initial: int, maximum: int) -> None:
        """Set buffer sizes. Only allowed before iteration starts."""
        if self._started:
            raise RuntimeError("buffer set after scanning started")
        self._set_buffer(initial, maximum)

    @property
    def state(self) -> ScannerState:
        return self._state

    @property
    def max_token_size(self) -> int:
        return self._max_token_size

    @property
    def buffered(self) -> int:
        """Bytes read but not yet consumed by the split function."""
        return len(self._buf) - self._start

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        if self._state is ScannerState.DONE:
            raise StopIteration
        self._started = True
        try:
            token = self._advance()
        except Exception:
            self._finish()
            raise
        if token is None:
            self._finish()
            raise StopIteration
        self.tokens_yielded += 1
        self._state = ScannerState.TOKEN_READY
        return token

    def texts(self, encoding: str = "utf-8", errors: str = "strict") -> Iterator[str]:
        """Iterate over the remaining tokens decoded as text."""
        for token in self:
            yield token.decode(encoding, errors)

    def _finish(self) -> None:
        self._state = ScannerState.DONE
        self._buf = bytearray()
        self._start = 0

    def _advance(self) -> bytes | None:
        while True:
            if self.buffered > 0 or self._eof:
                size = self.buffered
                # The view must be released before _fill resizes _buf.
                with memoryview(self._buf) as view, view[self._start :].toreadonly() as data:
                    advance, token = self._call_split(data)
                self._start += advance

                if token is not None:
                    if self._eof and advance == 0:
                        self._empties += 1
                        if self._empties > self._empty_limit:
                            raise SplitFunctionError(
                                "too many empty tokens without progressing",
                                buffered=size,
                            )
                    else:
                        self._empties = 0
                    return token

                if advance > 0 and self.buffered > 0:
                    continue
                if self._eof:
                    return None

            self._state = ScannerState.NEED_MORE_INPUT
            self._fill()

    def _call_split(self, data: memoryview) -> tuple[int, bytes | None]:
        try:
            advance, token = self._split(data, self._eof)
        except TeeStreamError:
            raise
        except Exception as e:
            raise SplitFunctionError(
                f"split function failed: {e}", buffered=len(data), cause=e
            ) from e

        if advance < 0:
            raise SplitFunctionError(
                "split function returned negative advance count",
                advance=advance,
                buffered=len(data),
            )
        if advance > len(data):
            raise SplitFunctionError(
                "split function returned advance count beyond input",
                advance=advance,
                buffered=len(data),
            )
        if token is not None:
            token = bytes(token)
        return advance, token

    def _fill(self) -> None:
        """Read more input, growing the buffer when it is full."""
        if self._start > 0:
            del self._buf[: self._start]
            self._start = 0

        if len(self._buf) >= self._capacity:
            if self._capacity >= self._max_token_size:
                raise TokenTooLarge(
                    f"token exceeds maximum size of {self._max_token_size} bytes",
                    limit=self._max_token_size,
                    buffered=len(self._buf),
                )
            self._capacity = min(self._capacity * 2, self._max_token_size)

        chunk = read_chunk(self._stream, self._capacity - len(self._buf))
        if not chunk:
            self._eof = True
            return
        self._buf += chunk
        self.bytes_read += len(chunk)
