"""Tests for the concurrent fan-out variants."""

import asyncio
import threading

import pytest

from teestream import BytesSink, BytesStream, ParallelDuplicator, SinkWriteError
from teestream.errors import SourceReadError
from teestream.stream.aio import (
    AsyncDuplicator,
    AsyncParallelDuplicator,
    async_chain,
    async_drain,
)


async def byte_stream(*chunks: bytes):
    """Create an async byte stream from chunks."""
    for chunk in chunks:
        yield chunk


class TestParallelDuplicator:
    """Tests for ParallelDuplicator."""

    def test_all_sinks_receive_everything(self, sample_data: bytes) -> None:
        """Test every sink is byte-identical to the source."""
        sinks = [BytesSink() for _ in range(4)]

        with ParallelDuplicator(BytesStream(sample_data), sinks) as fan_out:
            total = fan_out.drain(257)

        assert total == len(sample_data)
        assert all(s.getvalue() == sample_data for s in sinks)

    def test_read_waits_for_all_writers(self) -> None:
        """Test read returns only after every sink accepted the chunk."""
        release = threading.Event()

        class SlowSink(BytesSink):
            def write(self, data: bytes, /) -> int:
                release.wait(5)
                return super().write(data)

        fast, slow = BytesSink(), SlowSink()
        fan_out = ParallelDuplicator(BytesStream(b"abc"), [fast, slow])
        threading.Timer(0.05, release.set).start()

        try:
            assert fan_out.read(3) == b"abc"
            assert slow.getvalue() == b"abc"
        finally:
            fan_out.close()

    def test_failure_reports_first_failing_sink(self, failing_sink) -> None:
        """Test the whole read fails when any sink fails."""
        good = BytesSink()
        sinks = [good, failing_sink("c"), failing_sink("d")]

        with ParallelDuplicator(BytesStream(b"abc"), sinks) as fan_out:
            with pytest.raises(SinkWriteError) as exc_info:
                fan_out.read(3)

        assert exc_info.value.sink_index == 1
        # Concurrent writers all ran before the read failed.
        assert good.getvalue() == b"abc"

    def test_closed_rejects_reads(self) -> None:
        """Test reads after close fail."""
        fan_out = ParallelDuplicator(BytesStream(b"abc"), [BytesSink()])
        fan_out.close()
        fan_out.close()
        with pytest.raises(ValueError):
            fan_out.read(1)


class TestAsyncDuplicator:
    """Tests for the asyncio variants."""

    @pytest.mark.asyncio
    async def test_async_chain(self) -> None:
        """Test async chained fan-out replicates every chunk in order."""
        sinks = [BytesSink() for _ in range(3)]

        chunks = []
        async for chunk in async_chain(byte_stream(b"hoge ", b"", b"fuga"), *sinks):
            chunks.append(chunk)

        assert chunks == [b"hoge ", b"fuga"]
        assert all(s.getvalue() == b"hoge fuga" for s in sinks)

    @pytest.mark.asyncio
    async def test_async_sink(self) -> None:
        """Test sinks with awaitable write are awaited."""
        received = []

        class AsyncSink:
            async def write(self, data: bytes) -> int:
                await asyncio.sleep(0)
                received.append(data)
                return len(data)

        total = await async_drain(AsyncDuplicator(byte_stream(b"a", b"bc"), AsyncSink()))

        assert total == 3
        assert received == [b"a", b"bc"]

    @pytest.mark.asyncio
    async def test_async_short_write(self) -> None:
        """Test short writes fail the async read."""

        class ShortSink:
            async def write(self, data: bytes) -> int:
                return 0

        with pytest.raises(SinkWriteError):
            await async_drain(AsyncDuplicator(byte_stream(b"abc"), ShortSink()))

    @pytest.mark.asyncio
    async def test_async_parallel(self, failing_sink) -> None:
        """Test parallel async fan-out joins writers and fails fast."""
        good = BytesSink()
        fan_out = AsyncParallelDuplicator(byte_stream(b"abc"), [good, failing_sink("c")])

        with pytest.raises(SinkWriteError) as exc_info:
            await async_drain(fan_out)

        assert exc_info.value.sink_index == 1
        assert good.getvalue() == b"abc"

    @pytest.mark.asyncio
    async def test_async_source_error_wrapped(self) -> None:
        """Test upstream failures surface as SourceReadError from async_drain."""

        async def broken():
            yield b"abc"
            raise ConnectionError("reset")

        sink = BytesSink()
        with pytest.raises(SourceReadError):
            await async_drain(AsyncDuplicator(broken(), sink))
        assert sink.getvalue() == b"abc"
