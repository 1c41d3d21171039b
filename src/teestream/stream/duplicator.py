"""
Replicating stream (Duplicator) and chain composition.

A Duplicator wraps one upstream Stream and one Sink. Every successful read
writes the same bytes to the sink before returning them. Duplicators nest,
so ``Duplicator(Duplicator(src, a), b)`` fans a single pass over ``src``
out to ``a`` and then ``b``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from teestream.stream.base import (
    DEFAULT_CHUNK_SIZE,
    Sink,
    Stream,
    describe,
    drain,
    read_chunk,
    write_all,
)
from teestream.telemetry import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

logger = get_logger("teestream.stream.duplicator")


class Duplicator:
    """Stream that copies everything read through it into a sink.

    The Duplicator holds non-owning references: closing it never closes the
    upstream stream or the sink. It is the only writer to its sink while it
    is in use.

    Example:
        >>> src = BytesStream(b"hello")
        >>> sink = BytesSink()
        >>> dup = Duplicator(src, sink)
        >>> dup.read(3)
        b'hel'
        >>> sink.getvalue()
        b'hel'
    """

    def __init__(
        self,
        upstream: Stream,
        sink: Sink,
        *,
        sink_index: int | None = None,
    ) -> None:
        """Initialize the duplicator.

        Args:
            upstream: Stream to read from (may itself be a Duplicator)
            sink: Destination for every chunk read
            sink_index: Position of the sink in a chain, for diagnostics
        """
        self._upstream = upstream
        self._sink = sink
        self._sink_index = sink_index
        self._closed = False
        self.bytes_replicated = 0

    @property
    def upstream(self) -> Stream:
        return self._upstream

    @property
    def sink(self) -> Sink:
        return self._sink

    @property
    def sink_index(self) -> int | None:
        return self._sink_index

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def name(self) -> str:
        return f"Duplicator({describe(self._upstream)} -> {describe(self._sink)})"

    def readable(self) -> bool:
        return not self._closed

    def read(self, size: int = -1, /) -> bytes | None:
        """Read from upstream and replicate the result to the sink.

        Args:
            size: Maximum number of bytes, passed unchanged upstream

        Returns:
            The chunk read, ``b""`` at end-of-stream, or ``None`` if a
            non-blocking upstream had no data

        Raises:
            SinkWriteError: If the sink raised or short-wrote the chunk
            ValueError: If the duplicator was closed
        """
        if self._closed:
            raise ValueError("read from closed Duplicator")

        # Upstream errors propagate unchanged and nothing is written.
        chunk = self._upstream.read(size)
        if not chunk:
            return chunk

        chunk = bytes(chunk)
        write_all(self._sink, chunk, sink_index=self._sink_index)
        self.bytes_replicated += len(chunk)
        return chunk

    def readinto(self, buffer: Any, /) -> int | None:
        """Read into a pre-allocated writable buffer."""
        view = memoryview(buffer).cast("B")
        chunk = self.read(len(view))
        if chunk is None:
            return None
        view[: len(chunk)] = chunk
        return len(chunk)

    def chunks(self, size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        """Iterate over chunks until end-of-stream.

        Raises:
            SourceReadError: If the upstream fails or keeps returning no data
        """
        while chunk := read_chunk(self, size):
            yield chunk

    def __iter__(self) -> Iterator[bytes]:
        return self.chunks()

    def close(self) -> None:
        """Mark the duplicator closed; wrapped objects stay open."""
        self._closed = True

    def __enter__(self) -> Duplicator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<{self.name} replicated={self.bytes_replicated}>"


def chain(source: Stream, *sinks: Sink) -> Stream:
    """Compose one Duplicator per sink over ``source``.

    ``chain(src, a, b, c)`` is ``Duplicator(Duplicator(Duplicator(src, a), b), c)``.
    With no sinks the source itself is returned.

    Returns:
        The outermost stream; read it to drive replication
    """
    head: Stream = source
    for index, sink in enumerate(sinks):
        head = Duplicator(head, sink, sink_index=index)
    return head


class DuplicatorChain:
    """An ordered chain of Duplicators with introspection.

    Reading once from the chain reads once from the source and writes the
    chunk to every sink in declaration order. If a sink fails, the read
    raises SinkWriteError and the sinks after it never see the chunk.

    Example:
        >>> fan_out = DuplicatorChain(src, [sink_b, sink_c, sink_d])
        >>> fan_out.drain()
        >>> sink_d.getvalue() == original
        True
    """

    def __init__(self, source: Stream, sinks: Sequence[Sink]) -> None:
        """Initialize the chain.

        Args:
            source: Stream read exactly once
            sinks: Sinks in the order they receive each chunk
        """
        self._source = source
        self._sinks = list(sinks)
        self._links: list[Duplicator] = []

        upstream: Stream = source
        for index, sink in enumerate(self._sinks):
            link = Duplicator(upstream, sink, sink_index=index)
            self._links.append(link)
            upstream = link
        self._head = upstream

        logger.debug("Built duplicator chain", sinks=len(self._sinks))

    @property
    def source(self) -> Stream:
        return self._source

    @property
    def sinks(self) -> list[Sink]:
        return list(self._sinks)

    @property
    def links(self) -> list[Duplicator]:
        return list(self._links)

    @property
    def head(self) -> Stream:
        """Outermost stream of the chain (the source if there are no sinks)."""
        return self._head

    def read(self, size: int = -1, /) -> bytes | None:
        return self._head.read(size)

    def drain(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
        """Read the chain to end-of-stream.

        Returns:
            Number of bytes replicated to each sink
        """
        return drain(self._head, chunk_size)

    def __len__(self) -> int:
        return len(self._links)

    def __repr__(self) -> str:
        return f"<DuplicatorChain source={describe(self._source)} sinks={len(self)}>"
