"""
Rule-based relationship extraction.

Each rule binds a subject-verb-object verb phrase to one relationship type
and a fixed confidence. Subjects and objects are matched only against the
labels already extracted as entities, so unmatched tokens never spawn new
entities. The broad ``is/are`` rule is evaluated last with the lowest
confidence.
"""

import re
from dataclasses import dataclass

from textgraph.core.logging import LoggerMixin
from textgraph.core.types import (
    EntityCandidate,
    RelationshipCandidate,
    RelationType,
    casefold_label,
)
from textgraph.kg.entity_extractor import EXTRACTED_BY
from textgraph.kg.normalizer import sentence_at, split_sentences


@dataclass(frozen=True)
class RelationRule:
    """
    One subject-verb-object rule.

    ``reverse`` rules store the edge object-to-subject, so that
    "Steve Jobs founded Apple" yields Apple FOUNDED_BY Steve Jobs.
    """

    name: str
    relation_type: str
    verb_pattern: str
    confidence: float
    reverse: bool = False


_BE = r"(?:is|are|was|were)"

RELATION_RULES: list[RelationRule] = [
    RelationRule("founded_by", RelationType.FOUNDED_BY.value,
                 rf"(?:{_BE}\s+|has\s+been\s+)?(?:founded|established|created)\s+by", 0.9),
    RelationRule("founded", RelationType.FOUNDED_BY.value,
                 r"(?:founded|co-founded|established)", 0.85, reverse=True),
    RelationRule("ceo_of", RelationType.CEO_OF.value,
                 rf"{_BE}\s+(?:the\s+)?(?:CEO|chief\s+executive)\s+of", 0.85),
    RelationRule("eats", RelationType.EATS.value, r"(?:eats?|eating|ate)", 0.9),
    RelationRule("loves", RelationType.LOVES.value, r"(?:loves?|loving|loved)", 0.9),
    RelationRule("likes", RelationType.LIKES.value, r"(?:likes?|liking|liked)", 0.9),
    RelationRule("works_at", RelationType.WORKS_AT.value,
                 r"(?:works?|working|worked)\s+(?:at|for)|(?:is\s+)?employed\s+by", 0.8),
    RelationRule("lives_in", RelationType.LIVES_IN.value,
                 r"(?:lives?|living|lived|resides?|resided)\s+in", 0.8),
    RelationRule("knows", RelationType.KNOWS.value, r"(?:knows?|knowing|knew)", 0.8),
    RelationRule("owns", RelationType.OWNS.value, r"(?:owns?|owning|owned)", 0.8),
    RelationRule("uses", RelationType.USES.value, r"(?:uses?|using|used)", 0.8),
    RelationRule("reads", RelationType.READS.value, r"(?:reads?|reading)", 0.8),
    RelationRule("drives", RelationType.DRIVES.value, r"(?:drives?|driving|drove)", 0.8),
    RelationRule("plays", RelationType.PLAYS.value, r"(?:plays?|playing|played)", 0.8),
    RelationRule("teaches", RelationType.TEACHES.value, r"(?:teach(?:es)?|teaching|taught)", 0.8),
    RelationRule("studies", RelationType.STUDIES.value, r"(?:stud(?:y|ies)|studying|studied)", 0.8),
    RelationRule("has", RelationType.HAS.value, r"(?:has|have|having|had)", 0.7),
    RelationRule("is_a", RelationType.IS_A.value, rf"{_BE}(?:\s+(?:a|an|the))?", 0.7),
]


class PatternRelationshipExtractor(LoggerMixin):
    """
    Relationship extractor driven by an ordered list of verb-phrase rules.

    Args:
        rules: Rule list, evaluated in order (default ``RELATION_RULES``)
    """

    def __init__(self, rules: list[RelationRule] | None = None) -> None:
        self.rules = list(rules if rules is not None else RELATION_RULES)

    @staticmethod
    def _label_alternation(entities: list[EntityCandidate]) -> str:
        """Regex alternation over entity labels, longest first."""
        labels = sorted({e.label for e in entities}, key=len, reverse=True)
        return "|".join(r"\s+".join(re.escape(w) for w in label.split()) for label in labels)

    def _compile(self, rule: RelationRule, alternation: str) -> re.Pattern[str]:
        # Lookahead so overlapping matches (A likes B likes C) are all found.
        return re.compile(
            rf"(?=\b(?P<source>{alternation})\s+(?:{rule.verb_pattern})\s+(?P<target>{alternation})\b)",
            re.IGNORECASE,
        )

    def extract(
        self,
        text: str,
        entities: list[EntityCandidate],
    ) -> list[RelationshipCandidate]:
        """
        Extract relationships between known entities.

        Args:
            text: Normalized text
            entities: Entities extracted from the same text

        Returns:
            Relationship candidates, duplicates included
        """
        if not text or len(entities) < 2:
            return []

        lookup = {e.key: e for e in entities}
        alternation = self._label_alternation(entities)
        sentences = split_sentences(text)
        relationships: list[RelationshipCandidate] = []

        for rule in self.rules:
            for match in self._compile(rule, alternation).finditer(text):
                source = lookup.get(casefold_label(match.group("source")))
                target = lookup.get(casefold_label(match.group("target")))
                if source is None or target is None:
                    continue
                if source.key == target.key:
                    continue
                if rule.reverse:
                    source, target = target, source

                snippet = text[match.start("source"):match.end("target")]
                relationships.append(
                    RelationshipCandidate(
                        source=source.label,
                        target=target.label,
                        relation_type=rule.relation_type,
                        confidence=rule.confidence,
                        context=snippet,
                        properties={
                            "sentence": sentence_at(sentences, match.start("source")),
                            "extracted_by": EXTRACTED_BY,
                            "rule": rule.name,
                        },
                    )
                )

        self.logger.debug(
            "Relationships extracted",
            count=len(relationships),
            relationships=[f"{r.source} -[{r.relation_type}]-> {r.target}" for r in relationships],
        )
        return relationships
