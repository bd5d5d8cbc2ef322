"""
Local extraction: pattern rules, no network.
"""

from textgraph.core.types import ExtractionResult, ProcessingMethod
from textgraph.extraction.base import ExtractionStrategy
from textgraph.kg.candidate_filter import CandidateFilter
from textgraph.kg.entity_extractor import PatternEntityExtractor
from textgraph.kg.relation_extractor import PatternRelationshipExtractor


class LocalExtractionStrategy(ExtractionStrategy):
    """
    Rule-based strategy. Always available.

    Args:
        entity_extractor: Entity rule battery
        relationship_extractor: Verb-phrase relationship rules
        candidate_filter: Filter applied to the combined output
    """

    name = "local"

    def __init__(
        self,
        entity_extractor: PatternEntityExtractor | None = None,
        relationship_extractor: PatternRelationshipExtractor | None = None,
        candidate_filter: CandidateFilter | None = None,
    ) -> None:
        self.entity_extractor = entity_extractor or PatternEntityExtractor()
        self.relationship_extractor = relationship_extractor or PatternRelationshipExtractor()
        self.candidate_filter = candidate_filter or CandidateFilter()

    async def extract(self, text: str) -> ExtractionResult:
        entities = self.entity_extractor.extract(text)
        relationships = self.relationship_extractor.extract(text, entities)
        entities, relationships = self.candidate_filter.apply(entities, relationships)

        self.logger.info(
            "Local extraction complete",
            entities=len(entities),
            relationships=len(relationships),
        )

        return ExtractionResult(
            entities=entities,
            relationships=relationships,
            method=ProcessingMethod.LOCAL,
        )
