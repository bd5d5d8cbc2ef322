"""
Application settings.

Loaded from environment variables and an optional ``.env`` file via
pydantic-settings. Use ``get_settings()`` for the cached instance.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class GraphBackend(str, Enum):
    """Graph store implementation."""

    NEO4J = "neo4j"
    MEMORY = "memory"


class LLMProvider(str, Enum):
    """Generative model used by the external extraction strategy."""

    NONE = "none"
    OLLAMA = "ollama"
    GEMINI = "gemini"


class Settings(BaseSettings):
    """textgraph configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "textgraph"
    app_env: Environment = Environment.DEVELOPMENT
    debug: bool = False
    log_level: str = "INFO"

    # Graph store
    graph_backend: GraphBackend = GraphBackend.NEO4J
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: SecretStr = SecretStr("password")
    neo4j_database: str = "neo4j"
    neo4j_max_connection_pool_size: int = Field(default=50, ge=1, le=500)

    # Generative model
    llm_provider: LLMProvider = LLMProvider.NONE
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "mistral:7b-instruct"
    gemini_api_key: SecretStr | None = None
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com"
    llm_timeout: float = Field(default=60.0, gt=0, le=600)
    llm_max_input_chars: int = Field(default=8000, ge=100, le=100_000)
    llm_max_output_tokens: int = Field(default=2048, ge=64, le=32_768)
    llm_temperature: float = Field(default=0.1, ge=0, le=2)

    # Extraction & reconciliation
    max_input_chars: int = Field(default=200_000, ge=1)
    external_min_confidence: float = Field(default=0.7, ge=0, le=1)
    default_relationship_confidence: float = Field(default=0.8, ge=0, le=1)
    clear_before_processing: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept standard log levels in any case."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @property
    def is_production(self) -> bool:
        return self.app_env == Environment.PRODUCTION

    @property
    def external_enabled(self) -> bool:
        """Whether the external extraction strategy should be configured."""
        return self.llm_provider != LLMProvider.NONE


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
