"""
Pytest configuration and shared fixtures.
"""

from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest

from config.settings import Settings
from textgraph.extraction.coordinator import ExtractionCoordinator
from textgraph.extraction.local_strategy import LocalExtractionStrategy
from textgraph.kg.graph_reconciler import GraphReconciler
from textgraph.kg.networkx_store import NetworkXGraphStore
from textgraph.services.container import ServiceContainer
from textgraph.services.extraction_service import GraphExtractionService


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings (in-memory store, no model)."""
    return Settings(
        _env_file=None,
        app_env="development",
        debug=True,
        log_level="DEBUG",
        graph_backend="memory",
        llm_provider="none",
    )


@pytest.fixture
async def store() -> AsyncGenerator[NetworkXGraphStore, None]:
    store = NetworkXGraphStore()
    await store.initialize()

    yield store

    await store.cleanup()


@pytest.fixture
def reconciler(store) -> GraphReconciler:
    return GraphReconciler(store)


@pytest.fixture
def local_service(reconciler) -> GraphExtractionService:
    """Extraction service with local extraction and an in-memory graph."""
    coordinator = ExtractionCoordinator(local=LocalExtractionStrategy())
    return GraphExtractionService(coordinator=coordinator, reconciler=reconciler)


@pytest.fixture
async def container(test_settings) -> AsyncGenerator[ServiceContainer, None]:
    """Create and initialize service container for tests."""
    container = ServiceContainer(test_settings)
    await container.initialize()

    yield container

    await container.cleanup()


@pytest.fixture
def mock_httpx_client():
    """Mock httpx.AsyncClient with async get/post/aclose."""
    mock = MagicMock()
    mock.get = AsyncMock()
    mock.post = AsyncMock()
    mock.aclose = AsyncMock()
    return mock
