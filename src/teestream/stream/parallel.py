"""
Concurrent fan-out variant of the Duplicator.

Writes each chunk to all sinks on a thread pool and joins on every writer
before the read returns. A failure in any sink fails the whole read.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from teestream.errors import TeeStreamError
from teestream.stream.base import DEFAULT_CHUNK_SIZE, Sink, Stream, describe, drain, write_all
from teestream.sync import Once, WaitGroup

if TYPE_CHECKING:
    from collections.abc import Sequence


class ParallelDuplicator:
    """Stream that replicates each chunk to several sinks concurrently.

    Unlike a Duplicator chain, all sinks receive a chunk at the same time
    and a failing sink does not stop the others from receiving it. The read
    still fails, reporting the first failing sink in declaration order,
    after every writer has finished.

    Example:
        >>> with ParallelDuplicator(src, [sink_b, sink_c]) as fan_out:
        ...     fan_out.drain()
    """

    def __init__(
        self,
        upstream: Stream,
        sinks: Sequence[Sink],
        *,
        max_workers: int | None = None,
    ) -> None:
        """Initialize the parallel duplicator.

        Args:
            upstream: Stream to read from
            sinks: Sinks receiving every chunk
            max_workers: Writer threads (default: one per sink)
        """
        self._upstream = upstream
        self._sinks = list(sinks)
        workers = max_workers or max(1, len(self._sinks))
        self._executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="teestream-writer"
        )
        self._shutdown = Once()
        self.bytes_replicated = 0

    @property
    def sinks(self) -> list[Sink]:
        return list(self._sinks)

    @property
    def name(self) -> str:
        return f"ParallelDuplicator({describe(self._upstream)} -> {len(self._sinks)} sinks)"

    def read(self, size: int = -1, /) -> bytes | None:
        """Read a chunk and write it to all sinks before returning it.

        Raises:
            SinkWriteError: First failing sink in declaration order
        """
        if self._shutdown.done:
            raise ValueError("read from closed ParallelDuplicator")

        chunk = self._upstream.read(size)
        if not chunk:
            return chunk
        chunk = bytes(chunk)

        errors: list[TeeStreamError | None] = [None] * len(self._sinks)
        wg = WaitGroup()
        wg.add(len(self._sinks))

        def write(index: int, sink: Sink) -> None:
            try:
                write_all(sink, chunk, sink_index=index)
            except TeeStreamError as e:
                errors[index] = e
            finally:
                wg.done()

        for index, sink in enumerate(self._sinks):
            self._executor.submit(write, index, sink)
        wg.wait()

        for error in errors:
            if error is not None:
                raise error

        self.bytes_replicated += len(chunk)
        return chunk

    def drain(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
        """Read to end-of-stream, replicating every chunk."""
        return drain(self, chunk_size)

    def close(self) -> None:
        """Stop the writer threads; the stream and sinks stay open."""
        self._shutdown.do(self._executor.shutdown, wait=True)

    def __enter__(self) -> ParallelDuplicator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
