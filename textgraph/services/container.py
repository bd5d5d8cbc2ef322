"""
Service wiring.

Builds the graph store, model client, strategies and the extraction
service from ``Settings``, and owns their lifecycle.
"""

from typing import Any

from config.settings import GraphBackend, LLMProvider, Settings, get_settings
from textgraph.core.exceptions import ConfigurationError
from textgraph.core.logging import LoggerMixin, setup_logging
from textgraph.extraction.coordinator import ExtractionCoordinator
from textgraph.extraction.external_strategy import ExternalExtractionStrategy
from textgraph.extraction.local_strategy import LocalExtractionStrategy
from textgraph.kg.graph_reconciler import GraphReconciler
from textgraph.kg.graph_store import GraphStore
from textgraph.kg.neo4j_client import Neo4jClient
from textgraph.kg.networkx_store import NetworkXGraphStore
from textgraph.llm.gemini_client import GeminiClient
from textgraph.llm.ollama_client import OllamaClient
from textgraph.services.extraction_service import GraphExtractionService


class ServiceContainer(LoggerMixin):
    """
    Container for all service instances.

    Implements the Service Locator pattern for centralized
    dependency management.
    """

    _instance: "ServiceContainer | None" = None

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._initialized = False

        self._graph_store: GraphStore | None = None
        self._llm_client: OllamaClient | GeminiClient | None = None
        self._extraction_service: GraphExtractionService | None = None

    @classmethod
    def get_instance(cls, settings: Settings | None = None) -> "ServiceContainer":
        """Get singleton instance."""
        if cls._instance is None:
            if settings is None:
                settings = get_settings()
            cls._instance = cls(settings)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        cls._instance = None

    async def initialize(self) -> None:
        """Initialize all services."""
        if self._initialized:
            return

        setup_logging(
            level=self.settings.log_level,
            json_format=self.settings.is_production,
        )

        self._graph_store = self._build_graph_store()
        await self._graph_store.initialize()

        # Model clients connect lazily; a dead model only means local fallback.
        self._llm_client = self._build_llm_client()

        self._extraction_service = self._build_extraction_service()
        self._initialized = True

        self.logger.info(
            "Services initialized",
            graph_backend=self.settings.graph_backend.value,
            llm_provider=self.settings.llm_provider.value,
        )

    async def cleanup(self) -> None:
        """Cleanup all services."""
        if self._llm_client:
            await self._llm_client.cleanup()
            self._llm_client = None
        if self._graph_store:
            await self._graph_store.cleanup()
            self._graph_store = None

        self._extraction_service = None
        self._initialized = False

    def _build_graph_store(self) -> GraphStore:
        backend = self.settings.graph_backend
        if backend == GraphBackend.NEO4J:
            return Neo4jClient(
                uri=self.settings.neo4j_uri,
                user=self.settings.neo4j_user,
                password=self.settings.neo4j_password.get_secret_value(),
                database=self.settings.neo4j_database,
                max_connection_pool_size=self.settings.neo4j_max_connection_pool_size,
            )
        if backend == GraphBackend.MEMORY:
            return NetworkXGraphStore()
        raise ConfigurationError(f"Unknown graph backend: {backend}")

    def _build_llm_client(self) -> OllamaClient | GeminiClient | None:
        provider = self.settings.llm_provider
        if provider == LLMProvider.NONE:
            return None
        if provider == LLMProvider.OLLAMA:
            return OllamaClient(
                host=self.settings.ollama_host,
                model=self.settings.ollama_model,
                timeout=self.settings.llm_timeout,
            )
        if provider == LLMProvider.GEMINI:
            if self.settings.gemini_api_key is None:
                raise ConfigurationError("GEMINI_API_KEY is required when llm_provider=gemini")
            return GeminiClient(
                api_key=self.settings.gemini_api_key.get_secret_value(),
                model=self.settings.gemini_model,
                base_url=self.settings.gemini_base_url,
                timeout=self.settings.llm_timeout,
            )
        raise ConfigurationError(f"Unknown LLM provider: {provider}")

    def _build_extraction_service(self) -> GraphExtractionService:
        external = None
        if self._llm_client is not None:
            external = ExternalExtractionStrategy(
                client=self._llm_client,
                timeout=self.settings.llm_timeout,
                max_input_chars=self.settings.llm_max_input_chars,
                max_output_tokens=self.settings.llm_max_output_tokens,
                temperature=self.settings.llm_temperature,
                min_relationship_confidence=self.settings.external_min_confidence,
            )

        coordinator = ExtractionCoordinator(local=LocalExtractionStrategy(), external=external)
        reconciler = GraphReconciler(
            self._graph_store,
            default_relationship_confidence=self.settings.default_relationship_confidence,
        )
        return GraphExtractionService(
            coordinator=coordinator,
            reconciler=reconciler,
            max_input_chars=self.settings.max_input_chars,
            clear_before_processing=self.settings.clear_before_processing,
        )

    @property
    def graph_store(self) -> GraphStore:
        if self._graph_store is None:
            raise RuntimeError("Graph store not initialized")
        return self._graph_store

    @property
    def extraction_service(self) -> GraphExtractionService:
        if self._extraction_service is None:
            raise RuntimeError("Extraction service not initialized")
        return self._extraction_service

    async def __aenter__(self) -> "ServiceContainer":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.cleanup()
