"""
Base classes for extraction strategies.
"""

from abc import ABC, abstractmethod
from typing import Protocol

from textgraph.core.logging import LoggerMixin
from textgraph.core.types import ExtractionResult, Unavailable


class TextGenerator(Protocol):
    """What the external strategy needs from a generative-model client."""

    async def generate(
        self,
        prompt: str,
        max_tokens: int = ...,
        temperature: float = ...,
        json_mode: bool = ...,
    ) -> str: ...


class ExtractionStrategy(ABC, LoggerMixin):
    """
    Abstract base class for extraction strategies.

    A strategy turns normalized text into entity and relationship
    candidates, or reports that it could not run.
    """

    name: str = "base"

    @abstractmethod
    async def extract(self, text: str) -> ExtractionResult | Unavailable:
        """
        Extract candidates from normalized text.

        Args:
            text: Normalized input text

        Returns:
            ExtractionResult, or Unavailable when the strategy cannot produce
            a result for this request
        """
        pass
