"""
Gemini client for the Google Generative Language REST API.

Each client holds its own API key; nothing is read from process-wide
state.
"""

from typing import Any

from textgraph.core.exceptions import ConfigurationError, LLMError
from textgraph.llm.base import HTTPModelClient


class GeminiClient(HTTPModelClient):
    """Async client for ``models/{model}:generateContent``."""

    provider = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com",
        timeout: float = 60.0,
    ) -> None:
        if not api_key:
            raise ConfigurationError("Gemini API key is required")

        super().__init__(base_url=base_url, model=model, timeout=timeout)
        self._api_key = api_key

    async def generate(
        self,
        prompt: str,
        max_tokens: int = 2048,
        temperature: float = 0.1,
        json_mode: bool = False,
        system: str | None = None,
    ) -> str:
        """
        Generate a completion.

        Returns:
            Concatenated text parts of the first candidate
        """
        generation_config: dict[str, Any] = {
            "temperature": temperature,
            "maxOutputTokens": max_tokens,
        }
        if json_mode:
            generation_config["responseMimeType"] = "application/json"

        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        if system:
            payload["systemInstruction"] = {"parts": [{"text": system}]}

        data = await self._post_json(
            f"/v1beta/models/{self.model}:generateContent",
            payload,
            prompt_length=len(prompt),
            params={"key": self._api_key},
        )

        candidates = data.get("candidates") or []
        if not isinstance(candidates, list) or not candidates:
            raise LLMError(
                "Gemini returned no candidates",
                model=self.model,
                details={"prompt_feedback": data.get("promptFeedback")},
            )

        # Blocked candidates come back with no content
        candidate = candidates[0] if isinstance(candidates[0], dict) else {}
        content = candidate.get("content") or {}
        parts = (content.get("parts") or []) if isinstance(content, dict) else []
        return "".join(
            part.get("text") or "" for part in parts if isinstance(part, dict)
        )
