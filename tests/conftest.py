"""Root pytest fixtures for teestream tests.

Provides instrumented streams and sinks: sinks that record the order of
events, sinks that fail or short-write, and streams that count reads or
fail on demand.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from teestream import BytesSink, BytesStream


class RecordingSink(BytesSink):
    """BytesSink that appends ``("write", name, data)`` to a shared log."""

    def __init__(self, name: str, log: list[tuple[Any, ...]]) -> None:
        super().__init__(name=name)
        self.log = log
        self.close_calls = 0

    def write(self, data: bytes, /) -> int:
        written = super().write(data)
        self.log.append(("write", self.name, bytes(data)))
        return written

    def close(self) -> None:
        self.close_calls += 1
        super().close()


class FailingSink(RecordingSink):
    """Raises OSError on the ``fail_on``-th write (1-based)."""

    def __init__(self, name: str, log: list[tuple[Any, ...]], fail_on: int = 1) -> None:
        super().__init__(name, log)
        self.fail_on = fail_on
        self.attempts = 0

    def write(self, data: bytes, /) -> int:
        self.attempts += 1
        if self.attempts >= self.fail_on:
            raise OSError(f"{self.name}: disk full")
        return super().write(data)


class ShortWriteSink(RecordingSink):
    """Accepts only the first ``limit`` bytes of each write."""

    def __init__(self, name: str, log: list[tuple[Any, ...]], limit: int = 1) -> None:
        super().__init__(name, log)
        self.limit = limit

    def write(self, data: bytes, /) -> int:
        super().write(data[: self.limit])
        return min(self.limit, len(data))


class CountingStream(BytesStream):
    """BytesStream that logs reads and counts closes."""

    def __init__(self, data: bytes, log: list[tuple[Any, ...]] | None = None) -> None:
        super().__init__(data, name="source")
        self.log = log
        self.close_calls = 0

    def read(self, size: int = -1, /) -> bytes:
        chunk = super().read(size)
        if self.log is not None:
            self.log.append(("read", self.name, chunk))
        return chunk

    def close(self) -> None:
        self.close_calls += 1
        super().close()


class FailingStream:
    """Returns ``data`` on the first read, then raises the given error."""

    name = "failing-source"

    def __init__(self, data: bytes = b"abc", error: Exception | None = None) -> None:
        self._data = data
        self._error = error or OSError("connection reset")
        self.reads = 0
        self.close_calls = 0

    def read(self, size: int = -1, /) -> bytes:
        self.reads += 1
        if self.reads == 1 and self._data:
            return self._data
        raise self._error

    def close(self) -> None:
        self.close_calls += 1


@pytest.fixture
def event_log() -> list[tuple[Any, ...]]:
    """Shared log of reads and writes in the order they happened."""
    return []


@pytest.fixture
def recording_sink(event_log: list[tuple[Any, ...]]) -> Callable[[str], RecordingSink]:
    """Factory for sinks recording into ``event_log``."""

    def make(name: str) -> RecordingSink:
        return RecordingSink(name, event_log)

    return make


@pytest.fixture
def failing_sink(event_log: list[tuple[Any, ...]]) -> Callable[..., FailingSink]:
    """Factory for sinks that fail on the n-th write."""

    def make(name: str, fail_on: int = 1) -> FailingSink:
        return FailingSink(name, event_log, fail_on=fail_on)

    return make


@pytest.fixture
def short_write_sink(event_log: list[tuple[Any, ...]]) -> Callable[..., ShortWriteSink]:
    """Factory for sinks that accept fewer bytes than given."""

    def make(name: str, limit: int = 1) -> ShortWriteSink:
        return ShortWriteSink(name, event_log, limit=limit)

    return make


@pytest.fixture
def counting_stream(event_log: list[tuple[Any, ...]]) -> Callable[[bytes], CountingStream]:
    """Factory for sources logging reads into ``event_log``."""

    def make(data: bytes) -> CountingStream:
        return CountingStream(data, event_log)

    return make


@pytest.fixture
def failing_stream() -> Callable[..., FailingStream]:
    """Factory for sources that fail after the first chunk."""
    return FailingStream


@pytest.fixture
def sample_data() -> bytes:
    """A few KiB of mixed text spanning several read chunks."""
    lines = [f"line {i}: the quick brown fox jumps over the lazy dog" for i in range(200)]
    return ("\n".join(lines) + "\n").encode()
