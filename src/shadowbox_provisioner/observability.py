"""Structured logging utilities.

Provides JSON log output with account context propagation and a timer for
provider calls.
"""

import json
import logging
import sys
import time
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

ROOT_LOGGER_NAME = "shadowbox_provisioner"

# Context variables for operation-scoped data
account_id_var: ContextVar[str | None] = ContextVar("account_id", default=None)
operation_var: ContextVar[str | None] = ContextVar("operation", default=None)


class LogLevel(str, Enum):
    """Log levels matching Python's logging module."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class LogContext:
    """Context data to include with every log entry."""

    account_id: str | None = None
    operation: str | None = None

    @classmethod
    def current(cls) -> "LogContext":
        """Get current context from context variables."""
        return cls(account_id=account_id_var.get(), operation=operation_var.get())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        result = {}
        if self.account_id:
            result["account_id"] = self.account_id
        if self.operation:
            result["operation"] = self.operation
        return result


@dataclass
class LogEntry:
    """A structured log entry."""

    level: LogLevel
    message: str
    timestamp: str
    logger: str
    context: dict[str, Any] = field(default_factory=dict)
    error: dict[str, Any] | None = None
    duration_ms: float | None = None

    def to_json(self) -> str:
        """Serialize to JSON string."""
        data = {
            "level": self.level.value,
            "message": self.message,
            "timestamp": self.timestamp,
            "logger": self.logger,
        }
        if self.context:
            data["context"] = self.context
        if self.error:
            data["error"] = self.error
        if self.duration_ms is not None:
            data["duration_ms"] = self.duration_ms
        return json.dumps(data)


class StructuredFormatter(logging.Formatter):
    """Formats log records as structured JSON."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        context = LogContext.current().to_dict()

        if hasattr(record, "context") and isinstance(record.context, dict):
            context.update(record.context)

        error = None
        if record.exc_info:
            error = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else "Unknown",
                "message": str(record.exc_info[1]) if record.exc_info[1] else "",
            }

        entry = LogEntry(
            level=LogLevel(record.levelname),
            message=record.getMessage(),
            timestamp=datetime.now(timezone.utc).isoformat(),
            logger=record.name,
            context=context,
            error=error,
            duration_ms=getattr(record, "duration_ms", None),
        )

        return entry.to_json()


class StructuredLogger:
    """Wrapper around Python logging with structured output.

    Records propagate to the ``shadowbox_provisioner`` logger, which
    configure_logging() sets up.

    Example:
        logger = StructuredLogger("shadowbox_provisioner.account")
        logger.info("Droplet created", context={"droplet_id": 42})
        logger.error("Create failed", error=exception)
    """

    def __init__(self, name: str, level: LogLevel | None = None) -> None:
        """Initialize structured logger.

        Args:
            name: Logger name (typically module name)
            level: Optional minimum log level; inherited when omitted
        """
        self.logger = logging.getLogger(name)
        if level is not None:
            self.logger.setLevel(level.value)

    def _log(
        self,
        level: LogLevel,
        message: str,
        context: dict[str, Any] | None = None,
        error: Exception | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """Internal log method."""
        extra: dict[str, Any] = {}
        if context:
            extra["context"] = context
        if duration_ms is not None:
            extra["duration_ms"] = duration_ms

        log_func = getattr(self.logger, level.value.lower())
        if error:
            log_func(message, exc_info=(type(error), error, error.__traceback__), extra=extra)
        else:
            log_func(message, extra=extra)

    def debug(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """Log at DEBUG level."""
        self._log(LogLevel.DEBUG, message, context, duration_ms=duration_ms)

    def info(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """Log at INFO level."""
        self._log(LogLevel.INFO, message, context, duration_ms=duration_ms)

    def warning(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        error: Exception | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """Log at WARNING level."""
        self._log(LogLevel.WARNING, message, context, error, duration_ms)

    def error(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        error: Exception | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """Log at ERROR level."""
        self._log(LogLevel.ERROR, message, context, error, duration_ms)


class AccountContext:
    """Context manager binding an account and operation to every log line.

    Example:
        async with AccountContext("acct-1", "create_server"):
            logger.info("Creating droplet")
    """

    def __init__(self, account_id: str, operation: str | None = None) -> None:
        self.account_id = account_id
        self.operation = operation
        # Store (var, token) tuples so we can reset properly
        self._tokens: list[tuple[ContextVar, Any]] = []

    def __enter__(self) -> "AccountContext":
        """Set context variables."""
        self._tokens.append((account_id_var, account_id_var.set(self.account_id)))
        if self.operation:
            self._tokens.append((operation_var, operation_var.set(self.operation)))
        return self

    def __exit__(self, *args: Any) -> None:
        """Reset context variables to their previous values."""
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()

    async def __aenter__(self) -> "AccountContext":
        """Async context manager entry."""
        return self.__enter__()

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        self.__exit__(*args)


class Timer:
    """Context manager for timing operations.

    Example:
        with Timer() as t:
            await do_operation()
        logger.info("Operation complete", duration_ms=t.duration_ms)
    """

    def __init__(self) -> None:
        """Initialize timer."""
        self.start_time: float = 0
        self.end_time: float = 0

    @property
    def duration_ms(self) -> float:
        """Get duration in milliseconds."""
        return (self.end_time - self.start_time) * 1000

    def __enter__(self) -> "Timer":
        """Start timer."""
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        """Stop timer."""
        self.end_time = time.perf_counter()


# Receives messages that are only emitted in debug mode
DiagnosticCallback = Callable[[str], None]

_diagnostics_logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.diagnostics")


def log_diagnostic(message: str) -> None:
    """Default diagnostics sink: the package logger at DEBUG level."""
    _diagnostics_logger.debug(message)


def configure_logging(
    level: LogLevel = LogLevel.INFO,
    format: str = "json",
) -> None:
    """Configure the package logger.

    Args:
        level: Minimum log level
        format: Output format ("json" or "text")
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level.value)

    # Remove existing handlers
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)

    if format == "json":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))

    root_logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger
    """
    return StructuredLogger(name)
