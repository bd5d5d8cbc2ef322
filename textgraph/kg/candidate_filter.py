"""
Candidate filtering shared by both extraction strategies.

Entity stage: dedup on case-folded label (first occurrence wins), drop
denylisted labels, then sort by confidence descending (stable, so ties keep
discovery order).

Relationship stage: keep relationships whose endpoints both survived the
entity stage, that are not self-loops, and that meet an optional
confidence floor.
"""

import re
from typing import Callable

from textgraph.core.logging import LoggerMixin
from textgraph.core.types import EntityCandidate, RelationshipCandidate, casefold_label

FUNCTION_WORDS = frozenset({
    # articles & determiners
    "a", "an", "the", "this", "that", "these", "those",
    # degree words & quantifiers
    "very", "quite", "rather", "some", "any", "all",
    # pronouns
    "i", "me", "my", "you", "your", "he", "him", "his", "she", "her",
    "it", "its", "we", "us", "our", "they", "them", "their",
    # conjunctions & prepositions
    "and", "or", "but", "of", "in", "on", "at", "to", "by", "for", "with",
})

_NUMERAL = re.compile(r"^\d+$")
_SINGLE_LETTER = re.compile(r"^[^\W\d_]$")


def is_generic_label(label: str) -> bool:
    """True for function words, bare single letters, pure numerals and labels of length <= 1."""
    key = casefold_label(label)
    return (
        len(key) <= 1
        or key in FUNCTION_WORDS
        or bool(_NUMERAL.match(key))
        or bool(_SINGLE_LETTER.match(key))
    )


class CandidateFilter(LoggerMixin):
    """
    Dedup/denylist/sort for entities and endpoint validation for relationships.

    Args:
        min_relationship_confidence: Confidence floor for relationships
            (None disables the floor)
        extra_denylist: Additional label predicate; labels for which it
            returns True are dropped
    """

    def __init__(
        self,
        min_relationship_confidence: float | None = None,
        extra_denylist: Callable[[str], bool] | None = None,
    ) -> None:
        self.min_relationship_confidence = min_relationship_confidence
        self.extra_denylist = extra_denylist

    def _is_denied(self, label: str) -> bool:
        if is_generic_label(label):
            return True
        return bool(self.extra_denylist and self.extra_denylist(label))

    def filter_entities(self, entities: list[EntityCandidate]) -> list[EntityCandidate]:
        """Deduplicate, drop denylisted labels, and sort by confidence."""
        seen: set[str] = set()
        kept: list[EntityCandidate] = []

        for entity in entities:
            key = entity.key
            if key in seen:
                continue
            seen.add(key)
            if self._is_denied(entity.label):
                continue
            kept.append(entity)

        dropped = len(entities) - len(kept)
        if dropped:
            self.logger.debug("Entities filtered out", dropped=dropped, kept=len(kept))

        return sorted(kept, key=lambda e: e.confidence, reverse=True)

    def filter_relationships(
        self,
        relationships: list[RelationshipCandidate],
        entities: list[EntityCandidate],
    ) -> list[RelationshipCandidate]:
        """
        Keep relationships with surviving, distinct endpoints.

        Args:
            relationships: Relationship candidates
            entities: Entities that survived ``filter_entities``
        """
        labels = {e.key for e in entities}
        kept = []

        for rel in relationships:
            if rel.is_self_loop:
                continue
            if casefold_label(rel.source) not in labels or casefold_label(rel.target) not in labels:
                continue
            if self._is_denied(rel.source) or self._is_denied(rel.target):
                continue
            if (
                self.min_relationship_confidence is not None
                and rel.confidence < self.min_relationship_confidence
            ):
                continue
            kept.append(rel)

        dropped = len(relationships) - len(kept)
        if dropped:
            self.logger.debug("Relationships filtered out", dropped=dropped, kept=len(kept))

        return kept

    def apply(
        self,
        entities: list[EntityCandidate],
        relationships: list[RelationshipCandidate],
    ) -> tuple[list[EntityCandidate], list[RelationshipCandidate]]:
        """Run both stages."""
        kept_entities = self.filter_entities(entities)
        return kept_entities, self.filter_relationships(relationships, kept_entities)
