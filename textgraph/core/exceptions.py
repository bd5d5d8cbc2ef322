"""
Custom exceptions for the textgraph system.

Provides a hierarchy of specific exceptions for better error handling
and debugging across all system components.
"""

from typing import Any


class TextGraphError(Exception):
    """
    Base exception for all textgraph errors.

    All custom exceptions inherit from this class, allowing for
    catch-all error handling when needed.
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        base = self.message
        if self.details:
            base += f" | Details: {self.details}"
        if self.cause:
            base += f" | Caused by: {self.cause}"
        return base


class ConfigurationError(TextGraphError):
    """
    Raised when there's a configuration error.

    Examples:
    - Unknown graph backend or LLM provider
    - Missing API key for the selected provider
    """

    pass


class ValidationError(TextGraphError):
    """
    Raised when input validation fails.

    Examples:
    - Empty or non-string input text
    - Input text over the configured size limit
    - Invalid entity/relationship type tags
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)[:100]
        super().__init__(message, details, cause)


class LLMError(TextGraphError):
    """
    Raised when generative model calls fail.

    Examples:
    - Connection errors
    - Generation timeout
    - Non-2xx responses
    """

    def __init__(
        self,
        message: str,
        model: str | None = None,
        prompt_length: int | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        details = details or {}
        if model:
            details["model"] = model
        if prompt_length:
            details["prompt_length"] = prompt_length
        super().__init__(message, details, cause)


class ExtractionUnavailableError(TextGraphError):
    """
    Raised inside the external strategy when no usable result exists.

    Never escapes the strategy: it is converted to an ``Unavailable``
    result so the coordinator can fall back to local extraction.
    """

    def __init__(
        self,
        message: str,
        reason: str | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        details = details or {}
        if reason:
            details["reason"] = reason
        super().__init__(message, details, cause)
        self.reason = reason or message


class _ProgressError(TextGraphError):
    """Base for errors reporting how far a request got before stopping."""

    def __init__(
        self,
        message: str,
        persisted_entities: int = 0,
        persisted_relationships: int = 0,
        failed_entities: int = 0,
        failed_relationships: int = 0,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        details = details or {}
        details.update(
            {
                "persisted_entities": persisted_entities,
                "persisted_relationships": persisted_relationships,
                "failed_entities": failed_entities,
                "failed_relationships": failed_relationships,
            }
        )
        super().__init__(message, details, cause)
        self.persisted_entities = persisted_entities
        self.persisted_relationships = persisted_relationships
        self.failed_entities = failed_entities
        self.failed_relationships = failed_relationships


class StoreError(_ProgressError):
    """
    Raised when graph persistence fails.

    Examples:
    - Cypher query failures
    - Transaction failures

    When raised out of a processing request it carries exact counts of
    what was and was not persisted.
    """

    pass


class StoreUnavailableError(StoreError):
    """Raised when the graph store cannot be reached at all."""

    pass


class RequestCancelledError(_ProgressError):
    """Raised when a processing request is cancelled between store calls."""

    pass
