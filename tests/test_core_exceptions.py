"""
Tests for the exception hierarchy.
"""

import pytest

from textgraph.core.exceptions import (
    ConfigurationError,
    ExtractionUnavailableError,
    LLMError,
    RequestCancelledError,
    StoreError,
    StoreUnavailableError,
    TextGraphError,
    ValidationError,
)


class TestTextGraphError:
    def test_message_only(self):
        err = TextGraphError("boom")
        assert str(err) == "boom"
        assert err.details == {}
        assert err.cause is None

    def test_details_and_cause(self):
        cause = RuntimeError("root")
        err = TextGraphError("boom", details={"k": "v"}, cause=cause)
        assert "Details: {'k': 'v'}" in str(err)
        assert "Caused by: root" in str(err)

    @pytest.mark.parametrize(
        "exc_class",
        [
            ConfigurationError,
            ValidationError,
            LLMError,
            ExtractionUnavailableError,
            StoreError,
            StoreUnavailableError,
            RequestCancelledError,
        ],
    )
    def test_hierarchy(self, exc_class):
        assert issubclass(exc_class, TextGraphError)


class TestValidationError:
    def test_field_and_value(self):
        err = ValidationError("bad", field="text", value="x" * 500)
        assert err.details["field"] == "text"
        assert len(err.details["value"]) == 100


class TestLLMError:
    def test_model_details(self):
        err = LLMError("failed", model="mistral", prompt_length=42)
        assert err.details == {"model": "mistral", "prompt_length": 42}


class TestExtractionUnavailableError:
    def test_reason(self):
        err = ExtractionUnavailableError("no reply", reason="timeout")
        assert err.reason == "timeout"
        assert err.details["reason"] == "timeout"

    def test_reason_defaults_to_message(self):
        assert ExtractionUnavailableError("no reply").reason == "no reply"


class TestProgressErrors:
    def test_store_error_counts(self):
        err = StoreError(
            "down",
            persisted_entities=2,
            persisted_relationships=1,
            failed_entities=1,
        )
        assert err.persisted_entities == 2
        assert err.persisted_relationships == 1
        assert err.failed_entities == 1
        assert err.failed_relationships == 0
        assert err.details["persisted_entities"] == 2

    def test_unavailable_is_store_error(self):
        err = StoreUnavailableError("unreachable", persisted_entities=3)
        assert isinstance(err, StoreError)
        assert err.persisted_entities == 3

    def test_cancelled_counts(self):
        err = RequestCancelledError("cancelled", persisted_entities=1)
        assert not isinstance(err, StoreError)
        assert err.persisted_entities == 1
        assert err.details["failed_relationships"] == 0
