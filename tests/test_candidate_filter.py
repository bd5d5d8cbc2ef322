"""
Tests for candidate filtering.
"""

import pytest

from textgraph.core.types import EntityCandidate, RelationshipCandidate
from textgraph.kg.candidate_filter import CandidateFilter, is_generic_label


def _entity(label, confidence=0.8, entity_type="CONCEPT"):
    return EntityCandidate(label=label, entity_type=entity_type, confidence=confidence)


def _rel(source, target, confidence=0.8, relation_type="KNOWS"):
    return RelationshipCandidate(
        source=source,
        target=target,
        relation_type=relation_type,
        confidence=confidence,
    )


class TestIsGenericLabel:
    @pytest.mark.parametrize("label", ["the", "This", "very", "Some", "they", "42", "x", "A", "  "])
    def test_generic(self, label):
        assert is_generic_label(label) is True

    @pytest.mark.parametrize("label", ["Apple", "Steve Jobs", "dog", "R2D2", "The Beatles"])
    def test_not_generic(self, label):
        assert is_generic_label(label) is False


class TestFilterEntities:
    def test_dedup_first_wins(self):
        entities = [
            _entity("Apple", 0.85, "ORGANIZATION"),
            _entity("apple", 0.9, "FOOD"),
        ]
        kept = CandidateFilter().filter_entities(entities)
        assert [(e.label, e.entity_type) for e in kept] == [("Apple", "ORGANIZATION")]

    def test_denylist(self):
        kept = CandidateFilter().filter_entities([_entity("The"), _entity("123"), _entity("Tesla")])
        assert [e.label for e in kept] == ["Tesla"]

    def test_sorted_by_confidence_stable(self):
        entities = [_entity("a1", 0.6), _entity("b1", 0.9), _entity("c1", 0.6), _entity("d1", 0.9)]
        kept = CandidateFilter().filter_entities(entities)
        assert [e.label for e in kept] == ["b1", "d1", "a1", "c1"]

    def test_extra_denylist(self):
        candidate_filter = CandidateFilter(extra_denylist=lambda label: "pdf" in label.lower())
        kept = candidate_filter.filter_entities([_entity("PDF Reader"), _entity("Mary")])
        assert [e.label for e in kept] == ["Mary"]

    def test_empty(self):
        assert CandidateFilter().filter_entities([]) == []


class TestFilterRelationships:
    def test_requires_surviving_endpoints(self):
        entities = [_entity("John"), _entity("Mary")]
        rels = [_rel("John", "Mary"), _rel("John", "Bob")]
        kept = CandidateFilter().filter_relationships(rels, entities)
        assert [r.as_triple for r in kept] == [("John", "KNOWS", "Mary")]

    def test_endpoint_match_case_insensitive(self):
        entities = [_entity("John"), _entity("Mary")]
        kept = CandidateFilter().filter_relationships([_rel("john", "MARY")], entities)
        assert len(kept) == 1

    def test_self_loop_dropped(self):
        entities = [_entity("John"), _entity("Mary")]
        assert CandidateFilter().filter_relationships([_rel("John", "john")], entities) == []

    def test_confidence_floor(self):
        entities = [_entity("John"), _entity("Mary")]
        rels = [_rel("John", "Mary", 0.69), _rel("Mary", "John", 0.7)]
        kept = CandidateFilter(min_relationship_confidence=0.7).filter_relationships(rels, entities)
        assert [r.source for r in kept] == ["Mary"]

    def test_no_floor_by_default(self):
        entities = [_entity("John"), _entity("Mary")]
        kept = CandidateFilter().filter_relationships([_rel("John", "Mary", 0.1)], entities)
        assert len(kept) == 1


class TestApply:
    def test_relationship_to_filtered_entity_dropped(self):
        entities = [_entity("John"), _entity("the")]
        rels = [_rel("John", "the")]
        kept_entities, kept_rels = CandidateFilter().apply(entities, rels)
        assert [e.label for e in kept_entities] == ["John"]
        assert kept_rels == []
