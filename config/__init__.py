"""Configuration package."""

from config.settings import Environment, GraphBackend, LLMProvider, Settings, get_settings

__all__ = ["Environment", "GraphBackend", "LLMProvider", "Settings", "get_settings"]
