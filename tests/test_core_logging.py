"""
Tests for structured logging configuration.

Covers setup_logging, get_logger, request_context, LoggerMixin, and log_operation.
"""

import logging
from unittest.mock import MagicMock, patch

import structlog

from textgraph.core.logging import (
    REDACTED,
    LoggerMixin,
    get_logger,
    log_operation,
    redact_secrets,
    request_context,
    setup_logging,
)


class TestSetupLogging:
    def test_default_setup(self):
        setup_logging()
        assert structlog.get_logger() is not None

    def test_json_format(self):
        setup_logging(json_format=True)
        assert structlog.get_logger() is not None

    def test_no_timestamp(self):
        setup_logging(add_timestamp=False)
        assert structlog.get_logger() is not None

    def test_all_log_levels(self):
        for level in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            setup_logging(level=level)


class TestGetLogger:
    def test_returns_logger(self):
        assert get_logger("test_module") is not None

    def test_with_context(self):
        assert get_logger("test_module", component="reconciler") is not None


class TestRequestContext:
    def test_binds_request_id(self):
        with request_context("req-1", operation="process_text") as request_id:
            bound = structlog.contextvars.get_contextvars()
            assert request_id == "req-1"
            assert bound["request_id"] == "req-1"
            assert bound["operation"] == "process_text"

        assert "request_id" not in structlog.contextvars.get_contextvars()

    def test_generates_request_id(self):
        with request_context() as request_id:
            assert request_id
            assert structlog.contextvars.get_contextvars()["request_id"] == request_id


class TestLoggerMixin:
    def test_provides_logger(self):
        class MyClass(LoggerMixin):
            pass

        assert MyClass().logger is not None

    def test_logger_cached(self):
        class MyClass(LoggerMixin):
            pass

        obj = MyClass()
        assert obj.logger is obj.logger


class TestLogOperation:
    def test_success(self):
        mock_logger = MagicMock()
        with patch("textgraph.core.logging.get_logger", return_value=mock_logger):
            log_operation("process_text", duration_ms=12.345, persisted_entities=4)

        mock_logger.info.assert_called_once()
        kwargs = mock_logger.info.call_args.kwargs
        assert kwargs["operation"] == "process_text"
        assert kwargs["duration_ms"] == 12.35
        assert kwargs["persisted_entities"] == 4

    def test_failure(self):
        mock_logger = MagicMock()
        with patch("textgraph.core.logging.get_logger", return_value=mock_logger):
            log_operation("process_text", success=False, error="StoreError")

        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args.kwargs["success"] is False


class TestRedactSecrets:
    def test_masks_secret_fields(self):
        event = {"event": "connect", "password": "hunter2", "api_key": "k", "uri": "bolt://db"}
        redacted = redact_secrets(None, "info", event)
        assert redacted["password"] == REDACTED
        assert redacted["api_key"] == REDACTED
        assert redacted["uri"] == "bolt://db"

    def test_untouched_without_secrets(self):
        assert redact_secrets(None, "info", {"event": "x"}) == {"event": "x"}


class TestLibraryLoggers:
    def test_quiet_unless_debug(self):
        setup_logging(level="INFO")
        assert logging.getLogger("httpx").level == logging.WARNING

        setup_logging(level="DEBUG")
        assert logging.getLogger("httpx").level == logging.DEBUG
