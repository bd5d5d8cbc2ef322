"""
Ollama client for local model inference.
"""

from typing import Any

import httpx

from textgraph.core.exceptions import LLMError
from textgraph.llm.base import HTTPModelClient


class OllamaClient(HTTPModelClient):
    """
    Async client for Ollama's ``/api/generate``.

    Connects to ``/api/tags`` on initialize to list installed models; a
    missing default model is only a warning since Ollama may pull it later.
    """

    provider = "ollama"

    def __init__(
        self,
        host: str = "http://localhost:11434",
        model: str = "mistral:7b-instruct",
        timeout: float = 60.0,
    ) -> None:
        super().__init__(base_url=host, model=model, timeout=timeout)
        self._available_models: list[str] = []

    @property
    def host(self) -> str:
        return self.base_url

    @property
    def available_models(self) -> list[str]:
        return list(self._available_models)

    async def _check_connection(self) -> None:
        try:
            response = await self._client.get("/api/tags")
            response.raise_for_status()
            self._available_models = [m["name"] for m in response.json().get("models", [])]
        except httpx.ConnectError as e:
            raise LLMError(
                f"Cannot connect to Ollama at {self.host}. Is it running?",
                model=self.model,
                cause=e,
            )
        except Exception as e:
            raise LLMError(f"Failed to initialize Ollama client: {e}", model=self.model, cause=e)

        if self.model not in self._available_models:
            self.logger.warning("Default model not found", model=self.model, available=self._available_models)

    async def generate(
        self,
        prompt: str,
        max_tokens: int = 2048,
        temperature: float = 0.1,
        json_mode: bool = False,
        system: str | None = None,
    ) -> str:
        """
        Generate a non-streaming completion.

        Args:
            prompt: Input prompt
            max_tokens: ``num_predict`` budget
            temperature: Sampling temperature
            json_mode: Constrain output to JSON (``format: json``)
            system: System prompt

        Returns:
            Generated text ("" if the reply has none)
        """
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {"num_predict": max_tokens, "temperature": temperature},
        }
        if json_mode:
            payload["format"] = "json"
        if system:
            payload["system"] = system

        data = await self._post_json("/api/generate", payload, prompt_length=len(prompt))
        response = data.get("response")
        return response if isinstance(response, str) else ""
