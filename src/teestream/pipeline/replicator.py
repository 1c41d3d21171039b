"""
Replication pipeline.

Owns a source and its sinks for the lifetime of one replication, drives the
configured strategy, and guarantees every resource it was handed is closed
exactly once whether replication succeeds or fails.
"""

from __future__ import annotations

import time
import uuid
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from teestream.errors import ConfigError, TeeStreamError
from teestream.pipeline.config import ReplicationConfig, ReplicationStrategy
from teestream.scan.scanner import Tokenizer
from teestream.stream.base import copy_to_sinks, describe
from teestream.stream.duplicator import DuplicatorChain
from teestream.stream.parallel import ParallelDuplicator
from teestream.sync import Once
from teestream.telemetry import LogContext, get_logger, log_context

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from teestream.scan.split import SplitFunc
    from teestream.stream.base import Sink, Stream

logger = get_logger("teestream.pipeline")


@dataclass
class ReplicationStats:
    """Counters for one replication run.

    Attributes:
        strategy: Strategy used
        sinks: Number of sinks
        reads: Calls made to the source's read
        bytes_read: Bytes read from the source, and written to each sink
        tokens: Tokens produced (0 when not tokenizing)
        elapsed_seconds: Wall-clock duration
    """

    strategy: ReplicationStrategy
    sinks: int
    reads: int = 0
    bytes_read: int = 0
    tokens: int = 0
    elapsed_seconds: float = 0.0
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def throughput_bps(self) -> float:
        """Bytes per second, 0 if nothing was timed."""
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.bytes_read / self.elapsed_seconds


class _MeteredStream:
    """Counts reads and bytes on their way out of the source."""

    def __init__(self, stream: Stream) -> None:
        self._stream = stream
        self.name = describe(stream)
        self.reads = 0
        self.bytes_read = 0

    def read(self, size: int = -1, /) -> bytes | None:
        self.reads += 1
        chunk = self._stream.read(size)
        if chunk:
            self.bytes_read += len(chunk)
        return chunk


class ReplicationPipeline:
    """Replicate one source to many sinks in a single pass.

    The pipeline is single use: call ``run()`` to replicate, or iterate
    ``tokens()``/``texts()`` to replicate while tokenizing. Either way the
    source and sinks are closed when replication ends, on success or on
    failure, unless ``owns_resources`` is False. Closing is guarded so each
    resource is closed exactly once, including when the pipeline is also
    used as a context manager.

    Example:
        >>> with ReplicationPipeline(open("a", "rb"), [open("b", "wb")]) as p:
        ...     stats = p.run()
    """

    def __init__(
        self,
        source: Stream,
        sinks: Sequence[Sink],
        config: ReplicationConfig | None = None,
        *,
        owns_resources: bool = True,
        pipeline_id: str | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            source: Stream read exactly once
            sinks: Sinks in the order they receive each chunk
            config: Replication settings (default: ReplicationConfig())
            owns_resources: Close source and sinks when replication ends
            pipeline_id: Identifier used in log context
        """
        self._source = source
        self._sinks = list(sinks)
        self._config = config or ReplicationConfig()
        self._owns_resources = owns_resources
        self._pipeline_id = pipeline_id or uuid.uuid4().hex[:12]
        self._closer = Once()
        self._used = False
        self._stats = ReplicationStats(
            strategy=self._config.strategy, sinks=len(self._sinks)
        )

    @property
    def config(self) -> ReplicationConfig:
        return self._config

    @property
    def pipeline_id(self) -> str:
        return self._pipeline_id

    @property
    def stats(self) -> ReplicationStats:
        return self._stats

    @property
    def closed(self) -> bool:
        return self._closer.done

    def _log_context(self, stage: str) -> LogContext:
        return LogContext(
            pipeline_id=self._pipeline_id,
            stage=stage,
            strategy=self._config.strategy.value,
        )

    def _claim(self) -> None:
        if self._used:
            raise TeeStreamError("replication pipeline already used")
        if self._closer.done:
            raise TeeStreamError("replication pipeline is closed")
        self._used = True

    def run(self) -> ReplicationStats:
        """Replicate the whole source into every sink.

        Returns:
            Counters for the run

        Raises:
            SinkWriteError: A sink failed; sinks are inconsistent and the
                pipeline is closed
            SourceReadError: The source failed
        """
        self._claim()
        metered = _MeteredStream(self._source)
        strategy = self._config.strategy
        chunk_size = self._config.chunk_size

        with log_context(self._log_context("replicate")):
            logger.debug("Replication started", sinks=len(self._sinks))
            start = time.perf_counter()
            try:
                if strategy is ReplicationStrategy.COPY:
                    copy_to_sinks(metered, self._sinks, chunk_size)
                elif strategy is ReplicationStrategy.PARALLEL:
                    with ParallelDuplicator(
                        metered, self._sinks, max_workers=self._config.max_workers
                    ) as fan_out:
                        fan_out.drain(chunk_size)
                else:
                    DuplicatorChain(metered, self._sinks).drain(chunk_size)
            except Exception as e:
                self._record(metered, start)
                logger.error(
                    "Replication failed",
                    error=str(e),
                    error_type=type(e).__name__,
                    bytes_read=metered.bytes_read,
                )
                self._close_quietly()
                raise

            self._record(metered, start)
            logger.info(
                "Replication finished",
                bytes_read=self._stats.bytes_read,
                reads=self._stats.reads,
                sinks=len(self._sinks),
            )
            self.close()
        return self._stats

    def tokens(self, split: SplitFunc | None = None) -> Iterator[bytes]:
        """Replicate while yielding tokens of the replicated bytes.

        Every token is yielded only after the bytes it came from reached
        every sink. Draining the iterator completes replication; abandoning
        it early (``close()`` on the generator) closes the resources.

        Args:
            split: Split function (default: the configured one)

        Raises:
            ConfigError: If the configured strategy is ``copy``, which
                cannot expose bytes incrementally
        """
        if self._config.strategy is ReplicationStrategy.COPY:
            raise ConfigError(
                "copy strategy cannot tokenize; use 'tee' or 'parallel'",
                field="strategy",
            )
        self._claim()
        return self._iter_tokens(split)

    def texts(
        self, split: SplitFunc | None = None, encoding: str = "utf-8"
    ) -> Iterator[str]:
        """Like ``tokens()``, decoding each token as text."""
        return (token.decode(encoding) for token in self.tokens(split))

    def _iter_tokens(self, split: SplitFunc | None) -> Iterator[bytes]:
        metered = _MeteredStream(self._source)
        start = time.perf_counter()
        fan_out: ParallelDuplicator | None = None
        if self._config.strategy is ReplicationStrategy.PARALLEL:
            fan_out = ParallelDuplicator(
                metered, self._sinks, max_workers=self._config.max_workers
            )
            head: Stream = fan_out
        else:
            head = DuplicatorChain(metered, self._sinks).head

        tokenizer = Tokenizer.from_config(head, self._config, split)
        completed = False
        try:
            for token in tokenizer:
                self._stats.tokens += 1
                yield token
            completed = True
        except Exception as e:
            with log_context(self._log_context("tokenize")):
                logger.error(
                    "Tokenized replication failed",
                    error=str(e),
                    error_type=type(e).__name__,
                    tokens=self._stats.tokens,
                )
            raise
        finally:
            if fan_out is not None:
                fan_out.close()
            self._record(metered, start)
            if completed:
                self.close()
            else:
                self._close_quietly()

    def _record(self, metered: _MeteredStream, start: float) -> None:
        self._stats.reads = metered.reads
        self._stats.bytes_read = metered.bytes_read
        self._stats.elapsed_seconds = time.perf_counter() - start

    def close(self) -> None:
        """Close the source and every sink, once.

        All closes are attempted; if any failed, the failure propagates
        after the rest ran.
        """
        self._closer.do(self._close_all)

    def _close_quietly(self) -> None:
        """Close while another error is already propagating."""
        try:
            self.close()
        except Exception:
            # logged in _close_one
            return

    def _close_all(self) -> None:
        if not self._owns_resources:
            return
        with log_context(self._log_context("close")), ExitStack() as stack:
            # Sinks close before the source (ExitStack unwinds in reverse).
            for resource in [self._source, *self._sinks]:
                close = getattr(resource, "close", None)
                if callable(close):
                    stack.callback(self._close_one, resource, close)

    def _close_one(self, resource: object, close: Any) -> None:
        try:
            close()
        except Exception as e:
            logger.error("Failed to close resource", resource=describe(resource), error=str(e))
            raise

    def __enter__(self) -> ReplicationPipeline:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if exc is None:
            self.close()
        else:
            self._close_quietly()
