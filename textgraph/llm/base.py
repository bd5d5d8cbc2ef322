"""
Shared plumbing for HTTP-backed generative-model clients.

Subclasses build the request payload and read the reply; this class owns
the httpx client lifecycle and maps transport failures onto ``LLMError``.
"""

from typing import Any

import httpx

from textgraph.core.exceptions import LLMError
from textgraph.core.logging import LoggerMixin


class HTTPModelClient(LoggerMixin):
    """
    Base class for model clients talking JSON over HTTP.

    Args:
        base_url: Server root
        model: Model name sent with each request
        timeout: Per-request timeout in seconds
    """

    provider = "model"

    def __init__(self, base_url: str, model: str, timeout: float = 60.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout

        self._client: httpx.AsyncClient | None = None
        self._initialized = False

    async def initialize(self) -> None:
        """Create the HTTP client and run the provider's connection check."""
        if self._initialized:
            return

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
        )
        try:
            await self._check_connection()
        except Exception:
            await self.cleanup()
            raise

        self._initialized = True
        self.logger.info("Model client initialized", provider=self.provider, model=self.model)

    async def _check_connection(self) -> None:
        """Hook for providers with a cheap liveness endpoint."""

    async def cleanup(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
        self._initialized = False

    async def _post_json(
        self,
        path: str,
        payload: dict[str, Any],
        prompt_length: int,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        if not self._initialized:
            await self.initialize()

        try:
            response = await self._client.post(path, json=payload, params=params)
            response.raise_for_status()
            data = response.json()

        except httpx.TimeoutException as e:
            raise LLMError(
                f"{self.provider} request timed out after {self.timeout}s",
                model=self.model,
                prompt_length=prompt_length,
                cause=e,
            )
        except httpx.HTTPStatusError as e:
            # The request URL may carry credentials; report the status only.
            raise LLMError(
                f"{self.provider} returned HTTP {e.response.status_code}",
                model=self.model,
                prompt_length=prompt_length,
            )
        except Exception as e:
            raise LLMError(
                f"Generation failed: {type(e).__name__}",
                model=self.model,
                prompt_length=prompt_length,
            )

        if not isinstance(data, dict):
            raise LLMError(
                f"{self.provider} reply is not a JSON object",
                model=self.model,
                prompt_length=prompt_length,
                details={"reply_type": type(data).__name__},
            )
        return data

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.cleanup()
