"""Tests for structured logging."""

import json
import logging
import sys

from moodify.infrastructure.observability.logging import (
    CompactExceptionFormatter,
    CorrelationIdFilter,
    CustomJsonFormatter,
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)


def _record(msg: str = "hello", exc_info: object = None) -> logging.LogRecord:
    return logging.LogRecord(
        name="moodify.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,  # type: ignore[arg-type]
    )


class TestCorrelationId:
    """Test correlation ID functionality."""

    def test_set_and_get_correlation_id(self) -> None:
        """Test setting and getting correlation ID."""
        result = set_correlation_id("test-123-abc")
        assert result == "test-123-abc"
        assert get_correlation_id() == "test-123-abc"

    def test_set_correlation_id_generates_uuid_when_none(self) -> None:
        """Test that setting None generates a UUID."""
        result = set_correlation_id(None)
        assert len(result) == 36
        assert get_correlation_id() == result

    def test_filter_stamps_records(self) -> None:
        set_correlation_id("stamp-me")
        record = _record()
        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "stamp-me"  # type: ignore[attr-defined]


class TestFormatters:
    """JSON and compact text formatters."""

    def test_json_formatter_adds_context_fields(self) -> None:
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
        record = _record("structured")
        record.correlation_id = "abc-123"  # type: ignore[attr-defined]

        payload = json.loads(formatter.format(record))

        assert payload["message"] == "structured"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "moodify.test"
        assert payload["correlation_id"] == "abc-123"

    def test_compact_formatter_shows_exception_chain(self) -> None:
        try:
            try:
                raise ValueError("root cause")
            except ValueError as e:
                raise RuntimeError("wrapper") from e
        except RuntimeError:
            exc_info = sys.exc_info()

        text = CompactExceptionFormatter(package="moodify").formatException(exc_info)

        lines = text.splitlines()
        assert lines[0] == "╰─► ValueError: root cause"
        assert any(line.startswith("╰─► RuntimeError: wrapper") for line in lines)


class TestLoggingConfiguration:
    """Test logging configuration."""

    def test_configure_logging_debug_level(self) -> None:
        configure_logging(log_level="DEBUG", json_format=False, app_name="test-app")
        assert logging.getLogger("test").getEffectiveLevel() <= logging.DEBUG

    def test_configure_logging_replaces_handlers(self) -> None:
        """Calling it twice leaves exactly one handler on the root logger."""
        configure_logging(log_level="INFO", json_format=True, app_name="test-app")
        configure_logging(log_level="INFO", json_format=True, app_name="test-app")
        root_logger = logging.getLogger()
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, CustomJsonFormatter)

    def test_noisy_libraries_are_quieted(self) -> None:
        configure_logging(log_level="DEBUG", json_format=False, app_name="test-app")
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("aiosqlite").level == logging.WARNING
