"""
Tests for service wiring.
"""

import pytest

from config.settings import Settings
from textgraph.core.exceptions import ConfigurationError
from textgraph.extraction.external_strategy import ExternalExtractionStrategy
from textgraph.kg.neo4j_client import Neo4jClient
from textgraph.kg.networkx_store import NetworkXGraphStore
from textgraph.llm.gemini_client import GeminiClient
from textgraph.llm.ollama_client import OllamaClient
from textgraph.services.container import ServiceContainer


def _settings(**overrides):
    values = {"graph_backend": "memory", "llm_provider": "none", "gemini_api_key": None}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestServiceContainer:
    async def test_memory_backend(self, container):
        assert isinstance(container.graph_store, NetworkXGraphStore)
        assert container.extraction_service.coordinator.external is None

    async def test_process_through_container(self, container):
        result = await container.extraction_service.process_text("Elon Musk owns Tesla.")
        assert result.relationship_count == 1

    async def test_not_initialized(self, test_settings):
        container = ServiceContainer(test_settings)
        with pytest.raises(RuntimeError):
            container.extraction_service

    async def test_cleanup(self, test_settings):
        async with ServiceContainer(test_settings) as container:
            assert container._initialized is True
        assert container._initialized is False
        assert container._graph_store is None

    async def test_settings_flow_into_service(self):
        settings = _settings(max_input_chars=500, clear_before_processing=True, default_relationship_confidence=0.6)
        async with ServiceContainer(settings) as container:
            service = container.extraction_service
            assert service.max_input_chars == 500
            assert service.clear_before_processing is True
            assert service.reconciler.default_relationship_confidence == 0.6

    async def test_ollama_builds_external_strategy(self):
        settings = _settings(llm_provider="ollama", llm_timeout=5.0, external_min_confidence=0.75)
        async with ServiceContainer(settings) as container:
            external = container.extraction_service.coordinator.external
            assert isinstance(external, ExternalExtractionStrategy)
            assert isinstance(external.client, OllamaClient)
            assert external.timeout == 5.0
            assert external.candidate_filter.min_relationship_confidence == 0.75

    async def test_gemini_requires_key(self):
        container = ServiceContainer(_settings(llm_provider="gemini"))
        with pytest.raises(ConfigurationError, match="GEMINI_API_KEY"):
            await container.initialize()
        await container.cleanup()

    def test_gemini_client_gets_key(self):
        container = ServiceContainer(_settings(llm_provider="gemini", gemini_api_key="k-123"))
        client = container._build_llm_client()
        assert isinstance(client, GeminiClient)
        assert client._api_key == "k-123"

    def test_neo4j_backend(self):
        settings = _settings(graph_backend="neo4j", neo4j_uri="bolt://db:7687", neo4j_password="pw")
        store = ServiceContainer(settings)._build_graph_store()
        assert isinstance(store, Neo4jClient)
        assert store.uri == "bolt://db:7687"
        assert store.password == "pw"

    def test_singleton(self, test_settings):
        ServiceContainer.reset_instance()
        try:
            first = ServiceContainer.get_instance(test_settings)
            assert ServiceContainer.get_instance() is first
        finally:
            ServiceContainer.reset_instance()
