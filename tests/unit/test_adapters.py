"""Tests for in-memory and HTTP stream adapters."""

import httpx
import pytest

from teestream import BytesSink, BytesStream, IterStream, SourceReadError, chain, drain
from teestream.stream.http import HttpResponseStream


class TestBytesStream:
    """Tests for BytesStream."""

    def test_read_sizes(self) -> None:
        """Test bounded and unbounded reads."""
        stream = BytesStream(b"abcdef")
        assert stream.read(2) == b"ab"
        assert stream.read() == b"cdef"
        assert stream.read(2) == b""
        assert stream.read_count == 3

    def test_closed(self) -> None:
        """Test reads after close fail."""
        stream = BytesStream(b"abc")
        stream.close()
        with pytest.raises(ValueError):
            stream.read(1)


class TestBytesSink:
    """Tests for BytesSink."""

    def test_collects_writes(self) -> None:
        """Test writes accumulate and report their length."""
        sink = BytesSink()
        assert sink.write(b"ab") == 2
        assert sink.write(b"c") == 1
        assert sink.getvalue() == b"abc"
        assert len(sink) == 3
        assert sink.write_count == 2

    def test_closed(self) -> None:
        """Test writes after close fail."""
        sink = BytesSink()
        sink.close()
        with pytest.raises(ValueError):
            sink.write(b"x")


class TestIterStream:
    """Tests for IterStream."""

    def test_splits_large_chunks(self) -> None:
        """Test chunks larger than the request are served across reads."""
        stream = IterStream([b"abcdef", b"gh"])
        assert stream.read(4) == b"abcd"
        assert stream.read(4) == b"ef"
        assert stream.read(4) == b"gh"
        assert stream.read(4) == b""

    def test_skips_empty_chunks(self) -> None:
        """Test empty chunks are not mistaken for end-of-stream."""
        stream = IterStream([b"", b"a", b"", b"b"])
        assert stream.read(10) == b"a"
        assert stream.read(10) == b"b"
        assert stream.read(10) == b""

    def test_read_all(self) -> None:
        """Test an unbounded read joins the remainder."""
        stream = IterStream([b"ab", b"cd", b"ef"])
        stream.read(1)
        assert stream.read() == b"bcdef"

    def test_close_closes_generator(self) -> None:
        """Test closing the stream closes a generator source."""
        closed = []

        def chunks():
            try:
                yield b"a"
                yield b"b"
            finally:
                closed.append(True)

        stream = IterStream(chunks())
        stream.read(1)
        stream.close()
        assert closed == [True]


def _client(status: int, body: bytes) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, content=body)

    return httpx.Client(transport=httpx.MockTransport(handler))


class TestHttpResponseStream:
    """Tests for the httpx adapter."""

    def test_replicates_body(self, sample_data: bytes) -> None:
        """Test an HTTP body fans out to every sink."""
        sinks = [BytesSink(), BytesSink()]

        with _client(200, sample_data) as client:
            with client.stream("GET", "https://example.test/data") as response:
                source = HttpResponseStream(response)
                total = drain(chain(source, *sinks), 100)

        assert source.status_code == 200
        assert source.name == "https://example.test/data"
        assert total == len(sample_data)
        assert all(s.getvalue() == sample_data for s in sinks)

    def test_error_status(self) -> None:
        """Test 4xx/5xx responses are reported as SourceReadError."""
        with _client(404, b"missing") as client:
            with client.stream("GET", "https://example.test/nope") as response:
                with pytest.raises(SourceReadError) as exc_info:
                    HttpResponseStream(response)

        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)

    def test_error_status_allowed(self) -> None:
        """Test raise_for_status=False streams error bodies."""
        with _client(500, b"oops") as client:
            with client.stream("GET", "https://example.test/err") as response:
                source = HttpResponseStream(response, raise_for_status=False)
                assert source.read(10) == b"oops"
