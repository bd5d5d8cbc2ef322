"""
Extraction strategies and their coordinator.

Components:
- Local rule-based strategy
- External generative-model strategy
- Coordinator with external-first, local-fallback selection
"""

from textgraph.extraction.base import ExtractionStrategy, TextGenerator
from textgraph.extraction.coordinator import ExtractionCoordinator
from textgraph.extraction.external_strategy import ExternalExtractionStrategy, is_technical_term
from textgraph.extraction.local_strategy import LocalExtractionStrategy

__all__ = [
    "ExtractionCoordinator",
    "ExtractionStrategy",
    "ExternalExtractionStrategy",
    "LocalExtractionStrategy",
    "TextGenerator",
    "is_technical_term",
]
