"""
Tests for the rule-based entity extractor.
"""

from textgraph.kg.entity_extractor import (
    CAPITALIZED_GUESS_CONFIDENCE,
    COMMON_NOUN_CONFIDENCE,
    ENTITY_RULES,
    EXTRACTED_BY,
    PATTERN_CONFIDENCE,
    EntityRule,
    PatternEntityExtractor,
    RawMatch,
    guess_capitalized_type,
    lexicon_finder,
)


def _by_label(entities):
    return {e.label: e for e in entities}


class TestRuleBattery:
    def test_rule_order(self):
        assert [r.name for r in ENTITY_RULES] == [
            "honorific_name",
            "organization_suffix",
            "organization_lexicon",
            "location_suffix",
            "location_lexicon",
            "food_lexicon",
            "technology_lexicon",
            "object_lexicon",
            "capitalized_phrase",
            "common_noun",
        ]

    def test_fixed_confidences(self):
        assert PATTERN_CONFIDENCE == 0.85
        assert CAPITALIZED_GUESS_CONFIDENCE == 0.70
        assert COMMON_NOUN_CONFIDENCE == 0.60


class TestLexiconFinder:
    def test_case_sensitive(self):
        find = lexicon_finder(["Apple"], ignore_case=False)
        assert [m.label for m in find("apple and Apple")] == ["Apple"]

    def test_multi_word_terms_any_spacing(self):
        find = lexicon_finder(["ice cream"], ignore_case=True)
        assert [m.label for m in find("I like Ice  cream")] == ["Ice  cream"]

    def test_whole_words_only(self):
        find = lexicon_finder(["app"], ignore_case=True)
        assert list(find("Apple happens")) == []


class TestGuessCapitalizedType:
    def _guess(self, text, label):
        start = text.index(label)
        return guess_capitalized_type(text, RawMatch(label, start, start + len(label)))

    def test_person_verb_after(self):
        assert self._guess("Elon Musk owns Tesla.", "Elon Musk") == "PERSON"

    def test_preceding_bigram(self):
        assert self._guess("Apple is founded by Steve Jobs.", "Steve Jobs") == "PERSON"
        assert self._guess("She lives in Berlin.", "Berlin") == "LOCATION"
        assert self._guess("He works at Initech.", "Initech") == "ORGANIZATION"

    def test_food_verb_before(self):
        assert self._guess("They eat Brie.", "Brie") == "FOOD"

    def test_first_name(self):
        assert self._guess("Yesterday Mary Poppins arrived.", "Mary Poppins") == "PERSON"

    def test_default_concept(self):
        assert self._guess("Quantum Computing is fascinating.", "Quantum Computing") == "CONCEPT"


class TestPatternEntityExtractor:
    def test_reference_sentence(self):
        extractor = PatternEntityExtractor()
        entities = _by_label(extractor.extract("Apple is founded by Steve Jobs. Elon Musk owns Tesla."))

        assert set(entities) == {"Apple", "Steve Jobs", "Elon Musk", "Tesla"}
        assert entities["Apple"].entity_type == "ORGANIZATION"
        assert entities["Tesla"].entity_type == "ORGANIZATION"
        assert entities["Steve Jobs"].entity_type == "PERSON"
        assert entities["Elon Musk"].entity_type == "PERSON"

    def test_discovery_order(self):
        extractor = PatternEntityExtractor()
        labels = [e.label for e in extractor.extract("Apple is founded by Steve Jobs. Elon Musk owns Tesla.")]
        # lexicon rules come before the capitalized-phrase rule
        assert labels == ["Apple", "Tesla", "Steve Jobs", "Elon Musk"]

    def test_provenance_properties(self):
        extractor = PatternEntityExtractor()
        entities = _by_label(extractor.extract("Apple is founded by Steve Jobs. Elon Musk owns Tesla."))

        tesla = entities["Tesla"]
        assert tesla.properties["sentence"] == "Elon Musk owns Tesla."
        assert tesla.properties["extracted_by"] == EXTRACTED_BY
        assert tesla.properties["rule"] == "organization_lexicon"

        steve = entities["Steve Jobs"]
        assert steve.properties["guessed"] is True
        assert steve.confidence == CAPITALIZED_GUESS_CONFIDENCE

    def test_first_rule_wins_label(self):
        extractor = PatternEntityExtractor()
        entities = extractor.extract("Apple sells apple juice.")
        apples = [e for e in entities if e.key == "apple"]
        assert len(apples) == 1
        assert apples[0].entity_type == "ORGANIZATION"

    def test_lowercase_apple_is_food(self):
        extractor = PatternEntityExtractor()
        entities = _by_label(extractor.extract("I eat an apple every day."))
        assert entities["apple"].entity_type == "FOOD"
        assert entities["apple"].confidence == PATTERN_CONFIDENCE

    def test_honorific(self):
        extractor = PatternEntityExtractor()
        entities = _by_label(extractor.extract("Dr. Smith works at Acme Corp."))
        assert entities["Smith"].entity_type == "PERSON"
        assert entities["Smith"].properties["rule"] == "honorific_name"
        assert entities["Acme Corp"].entity_type == "ORGANIZATION"

    def test_leading_function_word_trimmed(self):
        extractor = PatternEntityExtractor()
        entities = _by_label(extractor.extract("The Acme Company hired her."))
        assert "Acme Company" in entities
        assert "The Acme Company" not in entities

    def test_location_suffix(self):
        extractor = PatternEntityExtractor()
        entities = _by_label(extractor.extract("We met near Central Park yesterday."))
        assert entities["Central Park"].entity_type == "LOCATION"

    def test_common_noun(self):
        extractor = PatternEntityExtractor()
        entities = _by_label(extractor.extract("the dog sleeps."))
        assert entities["dog"].entity_type == "OBJECT"
        assert entities["dog"].confidence == COMMON_NOUN_CONFIDENCE
        assert entities["dog"].properties["common_noun"] is True

    def test_overlapping_span_dropped(self):
        extractor = PatternEntityExtractor()
        labels = [e.label for e in extractor.extract("Mary lives in New York City.")]
        # "New York" (lexicon) and "New York City" (suffix) overlap; suffix rule runs first
        assert "New York City" in labels
        assert "New York" not in labels

    def test_repeated_phrase_keeps_span(self):
        extractor = PatternEntityExtractor()
        once = {e.label for e in extractor.extract("Google University is big.")}
        twice = {e.label for e in extractor.extract("Google University is big. Google University is big.")}
        assert once == {"Google University"}
        assert twice == once

    def test_single_letters_ignored(self):
        extractor = PatternEntityExtractor()
        assert extractor.extract("I A B") == []

    def test_empty_text(self):
        assert PatternEntityExtractor().extract("") == []
        assert PatternEntityExtractor().extract("   ") == []

    def test_custom_rules(self):
        rule = EntityRule(
            name="planets",
            finder=lexicon_finder(["Mars"], ignore_case=False),
            confidence=0.9,
            entity_type="LOCATION",
        )
        entities = PatternEntityExtractor(rules=[rule]).extract("Elon Musk wants Mars.")
        assert [(e.label, e.entity_type) for e in entities] == [("Mars", "LOCATION")]

    def test_scan_is_per_rule(self):
        extractor = PatternEntityExtractor()
        scanned = extractor.scan("Apple and apple")
        assert len(scanned) == len(ENTITY_RULES)
        # organization lexicon and food lexicon both see their own spans
        assert [m.label for m in scanned[2]] == ["Apple"]
        assert [m.label for m in scanned[5]] == ["Apple", "apple"]
