"""
In-memory stream and sink adapters.

- BytesStream: Stream over a bytes object
- BytesSink: Sink collecting everything written to it
- IterStream: Stream over an iterable of byte chunks (generators,
  ``httpx.Response.iter_bytes()``, ``file.__iter__``)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class BytesStream:
    """Stream over an in-memory byte string.

    Attributes:
        read_count: Number of ``read`` calls made so far
    """

    def __init__(self, data: bytes | bytearray | memoryview, name: str = "<bytes>") -> None:
        self._data = bytes(data)
        self._pos = 0
        self._closed = False
        self.name = name
        self.read_count = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def read(self, size: int = -1, /) -> bytes:
        if self._closed:
            raise ValueError("read from closed BytesStream")
        self.read_count += 1
        if size is None or size < 0:
            end = len(self._data)
        else:
            end = min(self._pos + size, len(self._data))
        chunk = self._data[self._pos : end]
        self._pos = end
        return chunk

    def close(self) -> None:
        self._closed = True


class BytesSink:
    """Sink that keeps every byte written to it.

    Attributes:
        write_count: Number of ``write`` calls accepted
    """

    def __init__(self, name: str = "<memory>") -> None:
        self._buffer = bytearray()
        self._closed = False
        self.name = name
        self.write_count = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes, /) -> int:
        if self._closed:
            raise ValueError("write to closed BytesSink")
        self._buffer += data
        self.write_count += 1
        return len(data)

    def getvalue(self) -> bytes:
        """Return everything written so far."""
        return bytes(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)

    def close(self) -> None:
        self._closed = True


class IterStream:
    """Stream over an iterable of byte chunks.

    Chunks larger than the requested size are split across reads; the
    remainder is held until the next read. The iterable is consumed lazily
    and exactly once.
    """

    def __init__(self, chunks: Iterable[bytes], name: str = "<iterable>") -> None:
        self._iterator = iter(chunks)
        self._pending = b""
        self._exhausted = False
        self._closed = False
        self.name = name

    @property
    def closed(self) -> bool:
        return self._closed

    def read(self, size: int = -1, /) -> bytes:
        if self._closed:
            raise ValueError("read from closed IterStream")
        if size is None or size < 0:
            parts = [self._pending, *self._iterator]
            self._pending = b""
            self._exhausted = True
            return b"".join(parts)

        while not self._pending and not self._exhausted:
            try:
                self._pending = bytes(next(self._iterator))
            except StopIteration:
                self._exhausted = True

        chunk, self._pending = self._pending[:size], self._pending[size:]
        return chunk

    def close(self) -> None:
        self._closed = True
        close = getattr(self._iterator, "close", None)
        if close is not None:
            close()
