"""
Tests for text normalization and sentence splitting.
"""

import pytest

from textgraph.kg.normalizer import normalize, sentence_at, split_sentences


class TestNormalize:
    def test_collapses_whitespace(self):
        assert normalize("  Hello,\n\tworld!  ") == "Hello, world!"

    def test_replaces_disallowed_characters(self):
        assert normalize("a@b#c") == "a b c"
        assert normalize("snake_case") == "snake case"

    def test_keeps_whitelisted_punctuation(self):
        text = "Wait: (really) - it's \"fine\"; ok? yes!"
        assert normalize(text) == text

    def test_keeps_unicode_letters(self):
        assert normalize("Café in Zürich") == "Café in Zürich"

    @pytest.mark.parametrize("raw", ["", "   ", "@@@ ###", "\n\t"])
    def test_empty_result(self, raw):
        assert normalize(raw) == ""

    def test_idempotent(self):
        once = normalize("Apple   is\nfounded by   Steve Jobs!!")
        assert normalize(once) == once


class TestSplitSentences:
    def test_offsets(self):
        assert split_sentences("One. Two! Three?") == [
            (0, "One."),
            (5, "Two!"),
            (10, "Three?"),
        ]

    def test_single_sentence(self):
        assert split_sentences("No terminator") == [(0, "No terminator")]

    def test_empty(self):
        assert split_sentences("") == []


class TestSentenceAt:
    def test_lookup(self):
        sentences = split_sentences("One. Two! Three?")
        assert sentence_at(sentences, 0) == "One."
        assert sentence_at(sentences, 6) == "Two!"
        assert sentence_at(sentences, 12) == "Three?"

    def test_no_sentences(self):
        assert sentence_at([], 3) == ""
