"""Tests for observability module."""

import json
import logging
import time

import pytest

from shadowbox_provisioner.observability import (
    AccountContext,
    LogContext,
    LogEntry,
    LogLevel,
    StructuredFormatter,
    StructuredLogger,
    Timer,
    account_id_var,
    configure_logging,
    get_logger,
    log_diagnostic,
    operation_var,
)


def make_record(msg: str = "Test message", **attrs) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


class TestLogContext:
    """Tests for LogContext."""

    def test_current_returns_empty_when_no_context(self) -> None:
        """Current returns empty context when no vars set."""
        context = LogContext.current()
        assert context.account_id is None
        assert context.operation is None

    def test_to_dict_excludes_none_values(self) -> None:
        """to_dict excludes None values."""
        assert LogContext(account_id="acct").to_dict() == {"account_id": "acct"}

    def test_to_dict_includes_both_fields(self) -> None:
        """to_dict includes account and operation when set."""
        result = LogContext(account_id="acct", operation="create_server").to_dict()
        assert result == {"account_id": "acct", "operation": "create_server"}


class TestLogEntry:
    """Tests for LogEntry."""

    def test_to_json_basic(self) -> None:
        """to_json produces valid JSON without optional keys."""
        entry = LogEntry(
            level=LogLevel.INFO,
            message="Test message",
            timestamp="2024-01-01T00:00:00Z",
            logger="test",
        )
        result = json.loads(entry.to_json())

        assert result == {
            "level": "INFO",
            "message": "Test message",
            "timestamp": "2024-01-01T00:00:00Z",
            "logger": "test",
        }

    def test_to_json_with_error_and_duration(self) -> None:
        """to_json includes error info and duration."""
        entry = LogEntry(
            level=LogLevel.ERROR,
            message="Failed",
            timestamp="2024-01-01T00:00:00Z",
            logger="test",
            error={"type": "TransportError", "message": "timeout"},
            duration_ms=12.5,
        )
        result = json.loads(entry.to_json())

        assert result["error"]["type"] == "TransportError"
        assert result["duration_ms"] == 12.5


class TestStructuredFormatter:
    """Tests for StructuredFormatter."""

    def test_formats_as_json(self) -> None:
        """Formats log record as JSON."""
        parsed = json.loads(StructuredFormatter().format(make_record()))

        assert parsed["level"] == "INFO"
        assert parsed["message"] == "Test message"
        assert parsed["logger"] == "test"
        assert "timestamp" in parsed

    def test_includes_account_context(self) -> None:
        """Context variables and record context are merged."""
        with AccountContext("acct-1", "list_servers"):
            parsed = json.loads(
                StructuredFormatter().format(make_record(context={"count": 3}))
            )

        assert parsed["context"] == {
            "account_id": "acct-1",
            "operation": "list_servers",
            "count": 3,
        }

    def test_includes_duration(self) -> None:
        """duration_ms on the record is emitted."""
        parsed = json.loads(StructuredFormatter().format(make_record(duration_ms=4.0)))
        assert parsed["duration_ms"] == 4.0

    def test_includes_error_from_exc_info(self) -> None:
        """An attached exception is reported as type and message."""
        error = ValueError("bad payload")
        record = make_record(exc_info=(ValueError, error, None))

        parsed = json.loads(StructuredFormatter().format(record))

        assert parsed["error"] == {"type": "ValueError", "message": "bad payload"}


class TestStructuredLogger:
    """Tests for StructuredLogger."""

    def test_info_logs_at_info_level(self, caplog: pytest.LogCaptureFixture) -> None:
        """Info method logs at INFO level with context attached."""
        logger = StructuredLogger("test.logger", LogLevel.DEBUG)

        with caplog.at_level(logging.INFO, logger="test.logger"):
            logger.info("Test message", context={"server_id": "a:1"})

        assert len(caplog.records) == 1
        assert caplog.records[0].levelname == "INFO"
        assert caplog.records[0].context == {"server_id": "a:1"}

    def test_error_attaches_exception(self, caplog: pytest.LogCaptureFixture) -> None:
        """Error method logs at ERROR level with exc_info."""
        logger = StructuredLogger("test.error", LogLevel.DEBUG)

        with caplog.at_level(logging.ERROR, logger="test.error"):
            logger.error("Error message", error=ValueError("bad"))

        assert caplog.records[0].levelname == "ERROR"
        assert caplog.records[0].exc_info[0] is ValueError

    def test_get_logger_inherits_level(self) -> None:
        """get_logger does not pin a level on module loggers."""
        logger = get_logger("shadowbox_provisioner.some_module")
        assert logger.logger.level == logging.NOTSET


class TestAccountContext:
    """Tests for AccountContext."""

    def test_sets_and_resets(self) -> None:
        """Context variables are set inside and restored after."""
        with AccountContext("acct", "get_status"):
            assert account_id_var.get() == "acct"
            assert operation_var.get() == "get_status"

        assert account_id_var.get() is None
        assert operation_var.get() is None

    def test_nested(self) -> None:
        """Inner contexts restore the outer one on exit."""
        with AccountContext("outer", "list_servers"):
            with AccountContext("inner"):
                assert account_id_var.get() == "inner"
                assert operation_var.get() == "list_servers"
            assert account_id_var.get() == "outer"

    @pytest.mark.asyncio
    async def test_works_as_async_context_manager(self) -> None:
        """Works as async context manager."""
        async with AccountContext("async-acct"):
            assert account_id_var.get() == "async-acct"


class TestTimer:
    """Tests for Timer."""

    def test_measures_duration(self) -> None:
        """Measures elapsed time."""
        with Timer() as timer:
            time.sleep(0.05)

        assert timer.duration_ms >= 40  # Allow some variance
        assert timer.duration_ms < 1000


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_handler(self) -> None:
        """JSON format installs a StructuredFormatter."""
        configure_logging(LogLevel.WARNING)

        package_logger = logging.getLogger("shadowbox_provisioner")
        try:
            assert package_logger.level == logging.WARNING
            assert isinstance(package_logger.handlers[0].formatter, StructuredFormatter)
        finally:
            package_logger.handlers.clear()
            package_logger.setLevel(logging.NOTSET)


class TestLogDiagnostic:
    """Tests for the default diagnostics sink."""

    def test_logs_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        """Diagnostics go to the package logger at DEBUG level."""
        with caplog.at_level(logging.DEBUG, logger="shadowbox_provisioner"):
            log_diagnostic("hello")

        assert caplog.records[0].levelname == "DEBUG"
        assert caplog.records[0].name == "shadowbox_provisioner.diagnostics"
