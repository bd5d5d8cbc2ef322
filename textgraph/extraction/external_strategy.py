"""
External extraction through a generative model.

One prompt, one model call per request. The reply must be a JSON object
with ``entities`` and ``relationships`` arrays; malformed items are
dropped one by one, while an unusable reply as a whole turns into
``Unavailable`` so the coordinator can fall back.
"""

import asyncio
import json
import re
from typing import Any, Callable, TypeVar

from pydantic import ValidationError as PydanticValidationError

from textgraph.core.exceptions import ExtractionUnavailableError, LLMError
from textgraph.core.types import (
    EntityCandidate,
    EntityType,
    ExtractionResult,
    ProcessingMethod,
    RelationshipCandidate,
    RelationType,
    Unavailable,
)
from textgraph.extraction.base import ExtractionStrategy, TextGenerator
from textgraph.kg.candidate_filter import CandidateFilter

EXTRACTED_BY = "external-model"

T = TypeVar("T")

# Document-handling vocabulary the model tends to pick up from file
# conversion artifacts rather than from the content itself.
TECHNICAL_TERMS = frozenset({
    "pdf", "docx", "file", "text", "document", "conversion", "selectable",
    "parsing", "extraction", "processing", "format", "content", "stream",
    "object", "implementation", "library", "javascript", "mammoth",
    "buffer", "array", "string", "method", "function", "class", "pipeline",
})

_WORD = re.compile(r"\w+")
_CODE_FENCE = re.compile(r"```(?:json)?[ \t]*\n?|\n?```")


def is_technical_term(label: str) -> bool:
    """True if any whole word of the label is technical vocabulary."""
    return any(word in TECHNICAL_TERMS for word in _WORD.findall(label.casefold()))


EXTRACTION_PROMPT = """Analyze the following text and extract ALL entities and relationships. Focus ONLY on the actual content, ignore any technical or implementation details.

Text: "{text}"

IMPORTANT RULES:
- Extract ONLY from the actual text content provided
- For "Apple is founded by Steve Jobs", extract: Apple (COMPANY), Steve Jobs (PERSON), relationship: Apple FOUNDED_BY Steve Jobs
- For "Elon Musk owns Tesla", extract: Elon Musk (PERSON), Tesla (COMPANY), relationship: Elon Musk OWNS Tesla
- Focus on people, companies, products, attributes, and their relationships
- Ignore any PDF/DOCX processing terms, file formats, or technical implementation details
- Use high confidence (0.85+) for clear entities and relationships
- Every relationship source and target must be the label of an extracted entity

Entity types: {entity_types}
Relationship types: {relationship_types}

Return ONLY valid JSON in this exact format:
{{
  "entities": [
    {{"label": "entity name", "type": "ENTITY_TYPE", "confidence": 0.9, "properties": {{}}, "aliases": []}}
  ],
  "relationships": [
    {{"source": "source label", "target": "target label", "type": "RELATIONSHIP_TYPE", "confidence": 0.9, "context": "supporting phrase", "properties": {{}}}}
  ]
}}"""


def build_prompt(text: str) -> str:
    return EXTRACTION_PROMPT.format(
        text=text.replace('"', "'"),
        entity_types=", ".join(t.value for t in EntityType),
        relationship_types=", ".join(t.value for t in RelationType),
    )


def strip_code_fences(reply: str) -> str:
    return _CODE_FENCE.sub("", reply).strip()


class ExternalExtractionStrategy(ExtractionStrategy):
    """
    Strategy backed by a generative-model client.

    Args:
        client: Object with an async ``generate`` (see ``TextGenerator``)
        timeout: Seconds to wait for the model before giving up
        max_input_chars: Text is truncated to this many characters
        max_output_tokens: Generation budget
        temperature: Sampling temperature
        min_relationship_confidence: Relationships below this are dropped
    """

    name = "external"

    def __init__(
        self,
        client: TextGenerator,
        timeout: float = 60.0,
        max_input_chars: int = 8000,
        max_output_tokens: int = 2048,
        temperature: float = 0.1,
        min_relationship_confidence: float = 0.7,
    ) -> None:
        self.client = client
        self.timeout = timeout
        self.max_input_chars = max_input_chars
        self.max_output_tokens = max_output_tokens
        self.temperature = temperature
        self.candidate_filter = CandidateFilter(
            min_relationship_confidence=min_relationship_confidence,
            extra_denylist=is_technical_term,
        )

    async def extract(self, text: str) -> ExtractionResult | Unavailable:
        try:
            return await self._extract(text)
        except ExtractionUnavailableError as e:
            self.logger.warning("External extraction unavailable", reason=e.reason, error=str(e))
            return Unavailable(reason=e.reason)

    async def _extract(self, text: str) -> ExtractionResult:
        if len(text) > self.max_input_chars:
            self.logger.info(
                "Truncating text for model",
                original_chars=len(text),
                max_chars=self.max_input_chars,
            )
            text = text[: self.max_input_chars]

        reply = await self._call_model(build_prompt(text))
        entities, relationships = self.parse_reply(reply)
        entities, relationships = self.candidate_filter.apply(entities, relationships)

        self.logger.info(
            "External extraction complete",
            entities=len(entities),
            relationships=len(relationships),
        )

        return ExtractionResult(
            entities=entities,
            relationships=relationships,
            method=ProcessingMethod.EXTERNAL,
        )

    async def _call_model(self, prompt: str) -> str:
        try:
            reply = await asyncio.wait_for(
                self.client.generate(
                    prompt,
                    max_tokens=self.max_output_tokens,
                    temperature=self.temperature,
                    json_mode=True,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise ExtractionUnavailableError(
                f"Model did not answer within {self.timeout}s",
                reason="timeout",
                cause=e,
            )
        except LLMError as e:
            raise ExtractionUnavailableError(
                "Model call failed",
                reason="model_error",
                cause=e,
            )
        except Exception as e:
            raise ExtractionUnavailableError(
                f"Model client raised {type(e).__name__}",
                reason="model_error",
                cause=e,
            )

        if not isinstance(reply, str) or not reply.strip():
            raise ExtractionUnavailableError("Model returned an empty reply", reason="empty_reply")
        return reply

    def parse_reply(
        self,
        reply: str,
    ) -> tuple[list[EntityCandidate], list[RelationshipCandidate]]:
        """
        Parse a model reply into candidates.

        Raises:
            ExtractionUnavailableError: If the reply is not a JSON object
        """
        cleaned = strip_code_fences(reply)
        try:
            payload = json.loads(cleaned)
        except json.JSONDecodeError as e:
            raise ExtractionUnavailableError(
                "Model reply is not valid JSON",
                reason="invalid_json",
                details={"reply_preview": cleaned[:200]},
                cause=e,
            )

        if not isinstance(payload, dict):
            raise ExtractionUnavailableError(
                "Model reply is not a JSON object",
                reason="invalid_json",
                details={"reply_type": type(payload).__name__},
            )

        entities = self._parse_items(payload.get("entities"), self._entity_from_item)
        relationships = self._parse_items(payload.get("relationships"), self._relationship_from_item)
        return entities, relationships

    def _parse_items(
        self,
        items: Any,
        build: Callable[[dict[str, Any]], T],
    ) -> list[T]:
        if not isinstance(items, list):
            return []

        parsed: list[T] = []
        for item in items:
            try:
                parsed.append(build(item))
            except (KeyError, TypeError, AttributeError, ValueError, PydanticValidationError) as e:
                self.logger.debug("Dropping malformed model item", item=str(item)[:200], error=str(e))
        return parsed

    @staticmethod
    def _entity_from_item(item: dict[str, Any]) -> EntityCandidate:
        return EntityCandidate(
            label=item["label"],
            entity_type=item["type"],
            confidence=item.get("confidence", 0.8),
            aliases=item.get("aliases") or [],
            properties={**(item.get("properties") or {}), "extracted_by": EXTRACTED_BY},
        )

    @staticmethod
    def _relationship_from_item(item: dict[str, Any]) -> RelationshipCandidate:
        return RelationshipCandidate(
            source=item["source"],
            target=item["target"],
            relation_type=item["type"],
            confidence=item.get("confidence", 0.8),
            context=item.get("context") or "",
            properties={**(item.get("properties") or {}), "extracted_by": EXTRACTED_BY},
        )
