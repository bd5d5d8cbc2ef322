"""Core module with types, exceptions, and logging utilities."""

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
from textgraph.core.logging import get_logger, request_context, setup_logging
from textgraph.core.types import (
    EntityCandidate,
    EntityType,
    ExtractionResult,
    GraphSnapshot,
    ProcessingMethod,
    ProcessingResult,
    ProcessingStatistics,
    RelationshipCandidate,
    RelationType,
    StoredEntity,
    StoredRelationship,
    Unavailable,
)

__all__ = [
    # Exceptions
    "TextGraphError",
    "ConfigurationError",
    "ExtractionUnavailableError",
    "LLMError",
    "RequestCancelledError",
    "StoreError",
    "StoreUnavailableError",
    "ValidationError",
    # Logging
    "get_logger",
    "request_context",
    "setup_logging",
    # Types
    "EntityCandidate",
    "EntityType",
    "ExtractionResult",
    "GraphSnapshot",
    "ProcessingMethod",
    "ProcessingResult",
    "ProcessingStatistics",
    "RelationshipCandidate",
    "RelationType",
    "StoredEntity",
    "StoredRelationship",
    "Unavailable",
]
