"""
Structured logging configuration using structlog.

Console output in development, JSON lines in production. Logs go to
stderr so stdout stays free for command output. Every log line
emitted while a request is processed carries that request's id via
structlog contextvars.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator, TextIO
from uuid import uuid4

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Fields whose values never reach a log sink.
SECRET_FIELDS = frozenset({"api_key", "gemini_api_key", "password", "neo4j_password", "auth"})

# httpx logs full request URLs at INFO, and Gemini URLs carry the key.
_LIBRARY_LOGGERS = ("httpx", "httpcore", "neo4j")

REDACTED = "***"


def redact_secrets(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """structlog processor masking credential-bearing fields."""
    for field in SECRET_FIELDS.intersection(event_dict):
        event_dict[field] = REDACTED
    return event_dict


def _renderer(json_format: bool) -> list[Processor]:
    if json_format:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [
        structlog.dev.ConsoleRenderer(
            colors=False,
            exception_formatter=structlog.dev.plain_traceback,
        )
    ]


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    add_timestamp: bool = True,
    stream: TextIO | None = None,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: If True, output JSON logs (for production)
        add_timestamp: If True, add timestamp to log entries
        stream: Destination for log lines (stderr by default)
    """
    log_level = getattr(logging, level.upper())
    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=log_level,
    )

    # Driver chatter only shows up when debugging.
    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(log_level if log_level <= logging.DEBUG else logging.WARNING)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    structlog.configure(
        processors=processors + _renderer(json_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.stdlib.BoundLogger:
    """
    Get a logger instance with optional initial context.

    Example:
        logger = get_logger(__name__, component="reconciler")
        logger.info("Entity upserted", label="Apple")
    """
    logger = structlog.get_logger(name)
    return logger.bind(**initial_context) if initial_context else logger


@contextmanager
def request_context(request_id: str | None = None, **context: Any) -> Iterator[str]:
    """
    Bind a request id (and extra fields) to every log line in the block.

    Yields:
        The request id in effect
    """
    request_id = request_id or str(uuid4())
    with structlog.contextvars.bound_contextvars(request_id=request_id, **context):
        yield request_id


class LoggerMixin:
    """
    Mixin giving a class a ``logger`` bound to its module and class name.

    Usage:
        class GraphReconciler(LoggerMixin):
            async def clear_all(self):
                self.logger.info("Clearing graph")
    """

    _logger: structlog.stdlib.BoundLogger | None = None

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        if self._logger is None:
            self._logger = get_logger(self.__class__.__module__, component=self.__class__.__name__)
        return self._logger


def log_operation(
    operation: str,
    success: bool = True,
    duration_ms: float | None = None,
    **fields: Any,
) -> None:
    """Emit the summary line a service operation ends with."""
    if duration_ms is not None:
        fields["duration_ms"] = round(duration_ms, 2)

    logger = get_logger("operations")
    emit = logger.info if success else logger.error
    emit(
        "Operation completed" if success else "Operation failed",
        operation=operation,
        success=success,
        **fields,
    )
