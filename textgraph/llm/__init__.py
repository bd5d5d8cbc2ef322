"""
LLM module: generative-model clients used by the external extraction strategy.

Components:
- Shared HTTP client base
- Ollama client for local inference
- Gemini client for the Google Generative Language API
"""

from textgraph.llm.base import HTTPModelClient
from textgraph.llm.gemini_client import GeminiClient
from textgraph.llm.ollama_client import OllamaClient

__all__ = [
    "GeminiClient",
    "HTTPModelClient",
    "OllamaClient",
]
