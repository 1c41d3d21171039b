"""
Asyncio variants of the replicating stream.

The source is an ``AsyncIterator[bytes]`` (an HTTP body, a socket reader
loop, any async generator). Sinks may be ordinary Sinks or objects whose
``write`` returns an awaitable (for example a wrapper around
``asyncio.StreamWriter`` that drains after writing).
"""

from __future__ import annotations

import asyncio
import inspect
from typing import TYPE_CHECKING, Any

from teestream.errors import SinkWriteError, SourceReadError, TeeStreamError
from teestream.stream.base import describe

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, AsyncIterator, Sequence


async def async_write_all(sink: Any, data: bytes, *, sink_index: int | None = None) -> None:
    """Write ``data`` to a sync or async sink and verify it was taken whole.

    Raises:
        SinkWriteError: If the sink raised or reported a short write
    """
    expected = len(data)
    try:
        written = sink.write(data)
        if inspect.isawaitable(written):
            written = await written
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


class AsyncDuplicator:
    """Async iterator that copies each chunk into a sink before yielding it.

    Example:
        >>> async for chunk in AsyncDuplicator(response.aiter_bytes(), sink):
        ...     process(chunk)
    """

    def __init__(
        self,
        upstream: AsyncIterable[bytes],
        sink: Any,
        *,
        sink_index: int | None = None,
    ) -> None:
        self._upstream = upstream.__aiter__()
        self._sink = sink
        self._sink_index = sink_index
        self.bytes_replicated = 0

    def __aiter__(self) -> AsyncDuplicator:
        return self

    async def __anext__(self) -> bytes:
        # Empty chunks are skipped; end-of-stream propagates as StopAsyncIteration.
        while True:
            chunk = await self._upstream.__anext__()
            if chunk:
                break
        chunk = bytes(chunk)
        await async_write_all(self._sink, chunk, sink_index=self._sink_index)
        self.bytes_replicated += len(chunk)
        return chunk

    async def aclose(self) -> None:
        """Close the upstream async generator, if it is one."""
        aclose = getattr(self._upstream, "aclose", None)
        if aclose is not None:
            await aclose()


def async_chain(source: AsyncIterable[bytes], *sinks: Any) -> AsyncIterator[bytes]:
    """Compose one AsyncDuplicator per sink over ``source``."""
    head: AsyncIterable[bytes] = source
    for index, sink in enumerate(sinks):
        head = AsyncDuplicator(head, sink, sink_index=index)
    return head.__aiter__()


class AsyncParallelDuplicator:
    """Async iterator writing each chunk to all sinks concurrently.

    All writes for a chunk are gathered before the chunk is yielded; if any
    failed, the first failure in sink order is raised.
    """

    def __init__(self, upstream: AsyncIterable[bytes], sinks: Sequence[Any]) -> None:
        self._upstream = upstream.__aiter__()
        self._sinks = list(sinks)
        self.bytes_replicated = 0

    def __aiter__(self) -> AsyncParallelDuplicator:
        return self

    async def __anext__(self) -> bytes:
        while True:
            chunk = await self._upstream.__anext__()
            if chunk:
                break
        chunk = bytes(chunk)

        results = await asyncio.gather(
            *(
                async_write_all(sink, chunk, sink_index=index)
                for index, sink in enumerate(self._sinks)
            ),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

        self.bytes_replicated += len(chunk)
        return chunk


async def async_drain(stream: AsyncIterable[bytes]) -> int:
    """Consume an async byte stream to the end.

    Upstream failures that are not library errors are wrapped in
    SourceReadError.

    Returns:
        Number of bytes consumed
    """
    total = 0
    try:
        async for chunk in stream:
            total += len(chunk)
    except TeeStreamError:
        raise
    except Exception as e:
        raise SourceReadError(f"async read failed: {e}", cause=e) from e
    return total
