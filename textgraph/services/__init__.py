"""
Service layer for text-to-graph processing.

Components:
- Graph extraction service
- Service container (wiring from settings)
"""

from textgraph.services.container import ServiceContainer
from textgraph.services.extraction_service import GraphExtractionService

__all__ = [
    "GraphExtractionService",
    "ServiceContainer",
]
