"""
Stream layer - replication operators over byte streams.

- Stream / Sink: capability protocols
- Duplicator / chain / DuplicatorChain: single-pass fan-out by composition
- ParallelDuplicator: concurrent fan-out with join-before-return
- AsyncDuplicator / async_chain / AsyncParallelDuplicator: asyncio variants
- BytesStream / BytesSink / IterStream: in-memory adapters
- copy / copy_to_sinks / drain: eager strategies and pumps

HttpResponseStream lives in ``teestream.stream.http`` (``http`` extra).
"""

from teestream.stream.aio import (
    AsyncDuplicator,
    AsyncParallelDuplicator,
    async_chain,
    async_drain,
    async_write_all,
)
from teestream.stream.base import (
    DEFAULT_CHUNK_SIZE,
    Sink,
    Stream,
    copy,
    copy_to_sinks,
    describe,
    drain,
    read_chunk,
    write_all,
)
from teestream.stream.duplicator import Duplicator, DuplicatorChain, chain
from teestream.stream.memory import BytesSink, BytesStream, IterStream
from teestream.stream.parallel import ParallelDuplicator

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "AsyncDuplicator",
    "AsyncParallelDuplicator",
    "BytesSink",
    "BytesStream",
    "Duplicator",
    "DuplicatorChain",
    "IterStream",
    "ParallelDuplicator",
    "Sink",
    "Stream",
    "async_chain",
    "async_drain",
    "async_write_all",
    "chain",
    "copy",
    "copy_to_sinks",
    "describe",
    "drain",
    "read_chunk",
    "write_all",
]
