"""Tests for structured logging."""

import io
import json
import logging

from teestream.telemetry import (
    JsonFormatter,
    LogContext,
    LogLevel,
    TeeStreamLogger,
    TextFormatter,
    clear_log_context,
    get_log_context,
    get_logger,
    log_context,
    set_log_context,
)


def capture(name: str, formatter: logging.Formatter) -> tuple[TeeStreamLogger, io.StringIO]:
    """Route a logger's output into a buffer."""
    logger = get_logger(name)
    buffer = io.StringIO()
    handler = logging.StreamHandler(buffer)
    handler.setFormatter(formatter)
    underlying = logging.getLogger(name)
    underlying.handlers = [handler]
    underlying.setLevel(logging.DEBUG)
    return logger, buffer


class TestLogContext:
    """Tests for LogContext."""

    def test_empty_context(self) -> None:
        """Test empty context."""
        assert LogContext().to_dict() == {}

    def test_context_with_fields(self) -> None:
        """Test context with known fields and extras."""
        ctx = LogContext(pipeline_id="p1", stage="replicate").with_extra(sinks=3)
        assert ctx.to_dict() == {"pipeline_id": "p1", "stage": "replicate", "sinks": 3}

    def test_set_and_clear(self) -> None:
        """Test setting and clearing the current context."""
        set_log_context(LogContext(pipeline_id="p1", strategy="tee"))
        try:
            current = get_log_context()
            assert current.pipeline_id == "p1"
            assert current.strategy == "tee"
        finally:
            clear_log_context()
        assert get_log_context().to_dict() == {}

    def test_scoped_context_restores(self) -> None:
        """Test log_context restores the outer context on exit."""
        with log_context(LogContext(pipeline_id="outer")):
            with log_context(LogContext(pipeline_id="inner", stage="close")):
                assert get_log_context().pipeline_id == "inner"
            assert get_log_context().pipeline_id == "outer"
            assert get_log_context().stage is None
        assert get_log_context().pipeline_id is None


class TestTeeStreamLogger:
    """Tests for TeeStreamLogger."""

    def test_get_logger(self) -> None:
        """Test loggers are cached by name."""
        a = get_logger("teestream.test.cache")
        b = get_logger("teestream.test.cache")
        assert a.name == "teestream.test.cache"
        assert a._logger is b._logger

    def test_json_output(self) -> None:
        """Test JSON records carry fields and context."""
        logger, buffer = capture("teestream.test.json", JsonFormatter(include_timestamp=False))

        with log_context(LogContext(pipeline_id="p1", stage="replicate")):
            logger.info("Replication finished", bytes_read=10, sinks=2)

        record = json.loads(buffer.getvalue())
        assert record["message"] == "Replication finished"
        assert record["level"] == "INFO"
        assert record["bytes_read"] == 10
        assert record["sinks"] == 2
        assert record["context"] == {"pipeline_id": "p1", "stage": "replicate"}

    def test_text_output(self) -> None:
        """Test text records append fields and context."""
        logger, buffer = capture("teestream.test.text", TextFormatter())

        with log_context(LogContext(strategy="copy")):
            logger.warning("Slow sink", sink="c")

        line = buffer.getvalue()
        assert "WARNING" in line
        assert "Slow sink" in line
        assert "sink=c" in line
        assert "strategy=copy" in line

    def test_exception_output(self) -> None:
        """Test exceptions are included in JSON records."""
        logger, buffer = capture("teestream.test.exc", JsonFormatter())

        try:
            raise OSError("disk full")
        except OSError:
            logger.exception("Write failed")

        record = json.loads(buffer.getvalue())
        assert "disk full" in record["exception"]
        assert "timestamp" in record

    def test_is_enabled_for(self) -> None:
        """Test level checks follow the underlying logger."""
        logger, _ = capture("teestream.test.level", TextFormatter())
        logging.getLogger("teestream.test.level").setLevel(logging.WARNING)

        assert not logger.is_enabled_for(LogLevel.DEBUG)
        assert logger.is_enabled_for(LogLevel.ERROR)

    def test_level_conversion(self) -> None:
        """Test LogLevel maps to logging levels."""
        assert LogLevel.DEBUG.to_logging_level() == logging.DEBUG
        assert LogLevel.CRITICAL.to_logging_level() == logging.CRITICAL
