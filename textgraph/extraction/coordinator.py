"""
Strategy selection: external first, local as fallback.
"""

from textgraph.core.types import (
    EntityCandidate,
    ExtractionResult,
    ProcessingMethod,
    RelationshipCandidate,
    Unavailable,
)
from textgraph.core.logging import LoggerMixin
from textgraph.extraction.base import ExtractionStrategy


class ExtractionCoordinator(LoggerMixin):
    """
    Runs at most one external attempt, then local extraction if needed.

    External output is returned verbatim. Results from the two strategies
    are never merged.

    Args:
        local: Always-available strategy
        external: Optional model-backed strategy
    """

    def __init__(
        self,
        local: ExtractionStrategy,
        external: ExtractionStrategy | None = None,
    ) -> None:
        self.local = local
        self.external = external

    async def extract(self, text: str) -> ExtractionResult:
        if self.external is not None:
            outcome = await self.external.extract(text)

            if isinstance(outcome, ExtractionResult) and not outcome.is_empty:
                return outcome

            reason = outcome.reason if isinstance(outcome, Unavailable) else "empty_result"
            self.logger.info("Falling back to local extraction", reason=reason)

        outcome = await self.local.extract(text)
        if isinstance(outcome, Unavailable):
            self.logger.warning("Local extraction unavailable", reason=outcome.reason)
            return ExtractionResult(method=ProcessingMethod.LOCAL)

        return self._stamp_local(outcome)

    @staticmethod
    def _stamp_local(result: ExtractionResult) -> ExtractionResult:
        method = ProcessingMethod.LOCAL.value
        entities: list[EntityCandidate] = [
            e.model_copy(update={"properties": {**e.properties, "processing_method": method}})
            for e in result.entities
        ]
        relationships: list[RelationshipCandidate] = [
            r.model_copy(update={"properties": {**r.properties, "processing_method": method}})
            for r in result.relationships
        ]
        return ExtractionResult(
            entities=entities,
            relationships=relationships,
            method=ProcessingMethod.LOCAL,
        )
