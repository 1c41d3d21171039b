"""
Stream and sink capabilities.

A Stream is anything with ``read(size) -> bytes`` that returns ``b""`` at
end-of-stream; a Sink is anything with ``write(data)``. Open file objects,
sockets wrapped with ``makefile``, ``io.BytesIO`` and the adapters in this
package all qualify. Helpers here drive those capabilities: writing a chunk
completely, draining a stream and the eager bulk-copy strategy.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from teestream.errors import SinkWriteError, SourceReadError, TeeStreamError

if TYPE_CHECKING:
    from collections.abc import Sequence

#: Block size used by bulk copies and drains (matches io.Copy).
DEFAULT_CHUNK_SIZE = 32 * 1024

#: Consecutive reads without data tolerated before giving up.
MAX_CONSECUTIVE_EMPTY_READS = 100


@runtime_checkable
class Stream(Protocol):
    """Sequential byte source.

    ``read`` returns at most ``size`` bytes, ``b""`` at end-of-stream, and
    raises on failure. Non-blocking raw streams may return ``None`` when no
    data is available yet.
    """

    def read(self, size: int = -1, /) -> bytes | None: ...


@runtime_checkable
class Sink(Protocol):
    """Sequential byte destination.

    ``write`` must accept the whole chunk or fail. Returning a count smaller
    than the chunk length is a short write; ``None`` is taken as complete.
    """

    def write(self, data: bytes, /) -> int | None: ...


def describe(obj: object) -> str:
    """Printable name for a stream or sink, used in errors and logs."""
    name = getattr(obj, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(obj).__name__


def write_all(
    sink: Sink,
    data: bytes,
    *,
    sink_index: int | None = None,
) -> None:
    """Hand ``data`` to ``sink`` and verify it was taken whole.

    Args:
        sink: Destination
        data: Chunk to write
        sink_index: Position of the sink in its fan-out, for diagnostics

    Raises:
        SinkWriteError: If the sink raised or reported a short write
    """
    expected = len(data)
    try:
        written = sink.write(data)
    except TeeStreamError:
        raise
    except Exception as e:
        raise SinkWriteError(
            f"write to {describe(sink)} failed: {e}",
            sink_index=sink_index,
            sink_name=describe(sink),
            expected=expected,
            cause=e,
        ) from e

    if written is not None and written != expected:
        raise SinkWriteError(
            f"short write to {describe(sink)}: {written} of {expected} bytes",
            sink_index=sink_index,
            sink_name=describe(sink),
            expected=expected,
            written=written,
        )


def read_chunk(stream: Stream, size: int) -> bytes:
    """Read one non-empty chunk, or ``b""`` at end-of-stream.

    Retries reads that return ``None`` (no data yet) up to
    MAX_CONSECUTIVE_EMPTY_READS times. Exceptions that are not library
    errors are wrapped in SourceReadError.
    """
    for _ in range(MAX_CONSECUTIVE_EMPTY_READS):
        try:
            chunk = stream.read(size)
        except TeeStreamError:
            raise
        except Exception as e:
            raise SourceReadError(
                f"read from {describe(stream)} failed: {e}", cause=e
            ) from e
        if chunk is None:
            continue
        return bytes(chunk)
    raise SourceReadError(
        f"{describe(stream)} made no progress after "
        f"{MAX_CONSECUTIVE_EMPTY_READS} reads"
    )


def drain(stream: Stream, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Read ``stream`` to end-of-stream, discarding the data.

    This is how a Duplicator chain is pumped when nothing consumes the
    bytes besides the sinks.

    Returns:
        Number of bytes read
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    total = 0
    while chunk := read_chunk(stream, chunk_size):
        total += len(chunk)
    return total


def copy(
    dst: Sink, src: Stream, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> int:
    """Copy ``src`` into ``dst`` until end-of-stream.

    Returns:
        Number of bytes copied
    """
    return copy_to_sinks(src, [dst], chunk_size)


def copy_to_sinks(
    src: Stream,
    sinks: Sequence[Sink],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """Eager bulk copy of ``src`` into every sink.

    Each block is written to all sinks in declaration order before the next
    block is read, so a failing sink leaves later sinks one block behind,
    the same state a failing Duplicator chain leaves.

    Returns:
        Number of bytes read from ``src``
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    total = 0
    while chunk := read_chunk(src, chunk_size):
        for index, sink in enumerate(sinks):
            write_all(sink, chunk, sink_index=index)
        total += len(chunk)
    return total
