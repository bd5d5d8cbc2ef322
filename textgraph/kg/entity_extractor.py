"""
Rule-based entity extraction.

Applies a fixed, ordered battery of entity rules to normalized text:

1. Honorific + name (PERSON)
2. Organization suffixes and lexicon (ORGANIZATION)
3. Location suffixes and lexicon (LOCATION)
4. Food, technology and object lexicons
5. Capitalized phrases, typed by context heuristics (default CONCEPT)
6. Lowercase common nouns (OBJECT)

Rule order is significant. Every rule scans the text independently, then
claims are resolved sequentially in rule order: the first rule to claim a
case-folded label wins, and a later match overlapping an already claimed
span is dropped. Reordering the battery changes which type wins for
ambiguous tokens.
"""

import re
from dataclasses import dataclass
from typing import Callable, Iterator

from textgraph.core.logging import LoggerMixin
from textgraph.core.types import EntityCandidate, EntityType, casefold_label
from textgraph.kg.candidate_filter import FUNCTION_WORDS
from textgraph.kg.normalizer import sentence_at, split_sentences

# Confidence is fixed by method, never by content.
PATTERN_CONFIDENCE = 0.85
CAPITALIZED_GUESS_CONFIDENCE = 0.70
COMMON_NOUN_CONFIDENCE = 0.60

EXTRACTED_BY = "local-nlp"

_CAP_WORD = r"[A-Z][a-z]+"
_CAP_RUN = rf"{_CAP_WORD}(?:\s+{_CAP_WORD})*"

ORGANIZATIONS = [
    "Google", "Microsoft", "Apple", "Tesla", "SpaceX",
    "OpenAI", "Facebook", "Amazon", "Netflix", "Uber",
]
LOCATIONS = [
    "New York", "Los Angeles", "London", "Paris", "Tokyo", "Delhi",
    "Mumbai", "California", "Texas", "India", "USA", "America",
]
FOODS = [
    "apple", "mango", "banana", "orange", "pizza", "burger", "sandwich",
    "rice", "bread", "cake", "cookie", "chocolate", "ice cream", "coffee",
    "tea", "milk", "water", "juice",
]
TECHNOLOGY = [
    "computer", "laptop", "phone", "smartphone", "tablet", "software",
    "app", "website", "internet", "AI", "robot", "drone",
]
OBJECTS = [
    "car", "bike", "house", "book", "pen", "paper", "chair", "table",
    "door", "window", "bag", "box", "bottle", "cup", "glass",
]
COMMON_NOUNS = frozenset({
    "apple", "mango", "banana", "orange", "book", "car", "house", "dog",
    "cat", "computer", "phone", "table", "chair", "food", "water", "coffee",
    "tea", "pizza", "burger", "bird", "horse", "guitar", "piano", "ball",
})
FIRST_NAMES = frozenset({
    "ram", "john", "mary", "david", "sarah", "mike", "anna", "tom",
    "lisa", "alex", "sam", "emma", "jack", "lucy", "steve", "elon",
    "bill", "james", "maria", "peter",
})

# Verb following a capitalized phrase that marks it as a person.
_PERSON_VERBS = frozenset({
    "eats", "ate", "eating", "lives", "lived", "works", "worked",
    "likes", "liked", "loves", "loved", "knows", "knew", "owns", "owned",
    "drives", "drove", "reads", "teaches", "taught", "studies", "studied",
    "founded", "said", "says", "met", "married", "writes", "wrote",
    "plays", "played",
})
# Two words preceding a capitalized phrase, mapped to the phrase's type.
_PRECEDING_BIGRAMS = {
    "founded by": EntityType.PERSON,
    "created by": EntityType.PERSON,
    "owned by": EntityType.PERSON,
    "led by": EntityType.PERSON,
    "written by": EntityType.PERSON,
    "lives in": EntityType.LOCATION,
    "live in": EntityType.LOCATION,
    "lived in": EntityType.LOCATION,
    "born in": EntityType.LOCATION,
    "located in": EntityType.LOCATION,
    "works at": EntityType.ORGANIZATION,
    "work at": EntityType.ORGANIZATION,
    "worked at": EntityType.ORGANIZATION,
    "employed by": EntityType.ORGANIZATION,
}
_FOOD_VERBS = frozenset({"eat", "eats", "ate", "eating"})


@dataclass(frozen=True)
class RawMatch:
    """A span found by one rule before claiming."""

    label: str
    start: int
    end: int


Finder = Callable[[str], Iterator[RawMatch]]
TypeResolver = Callable[[str, RawMatch], str]


@dataclass(frozen=True)
class EntityRule:
    """
    One entry of the ordered rule battery.

    ``entity_type`` is fixed for pattern and lexicon rules; rules that
    guess carry a ``resolve_type`` callback instead.
    """

    name: str
    finder: Finder
    confidence: float
    entity_type: str | None = None
    resolve_type: TypeResolver | None = None
    flags: tuple[str, ...] = ()

    def type_for(self, text: str, match: RawMatch) -> str:
        if self.resolve_type is not None:
            return self.resolve_type(text, match)
        return self.entity_type or EntityType.CONCEPT.value


def _trim_leading_function_words(label: str, start: int) -> tuple[str, int]:
    """Drop leading function words (``The Acme Company`` -> ``Acme Company``)."""
    words = label.split(" ")
    while words and words[0].casefold() in FUNCTION_WORDS:
        start += len(words[0]) + 1
        words = words[1:]
    return " ".join(words), start


def regex_finder(pattern: str, flags: int = 0, group: str | int = 0, trim: bool = False) -> Finder:
    """Build a finder yielding one match per regex hit (``group`` is the label)."""
    compiled = re.compile(pattern, flags)

    def find(text: str) -> Iterator[RawMatch]:
        for match in compiled.finditer(text):
            label, start = match.group(group), match.start(group)
            if trim:
                label, start = _trim_leading_function_words(label, start)
            if label:
                yield RawMatch(label=label, start=start, end=start + len(label))

    return find


def lexicon_finder(terms: list[str], ignore_case: bool) -> Finder:
    """Build a finder over a word list; multi-word terms tolerate any spacing."""
    alternation = "|".join(
        r"\s+".join(re.escape(part) for part in term.split())
        for term in sorted(terms, key=len, reverse=True)
    )
    return regex_finder(rf"\b(?:{alternation})\b", re.IGNORECASE if ignore_case else 0)


def capitalized_finder(text: str) -> Iterator[RawMatch]:
    """Capitalized word runs; single words must be longer than two characters."""
    for match in regex_finder(rf"\b{_CAP_RUN}\b", trim=True)(text):
        if " " in match.label or len(match.label) > 2:
            yield match


def common_noun_finder(text: str) -> Iterator[RawMatch]:
    for match in re.finditer(r"\b[a-z]{3,}\b", text):
        if match.group() in COMMON_NOUNS:
            yield RawMatch(label=match.group(), start=match.start(), end=match.end())


def guess_capitalized_type(text: str, match: RawMatch) -> str:
    """
    Infer a type for a capitalized phrase from adjacent words.

    Checks, in order: a person verb right after the phrase, a telling
    word pair right before it, an eating verb right before it, and
    whether the first word is a known first name.
    """
    following = text[match.end:].split(maxsplit=1)
    next_word = following[0].strip(".,!?;:").casefold() if following else ""
    if next_word in _PERSON_VERBS:
        return EntityType.PERSON.value

    preceding = [w.strip(".,!?;:").casefold() for w in text[:match.start].split()[-2:]]
    if len(preceding) == 2 and " ".join(preceding) in _PRECEDING_BIGRAMS:
        return _PRECEDING_BIGRAMS[" ".join(preceding)].value
    if preceding and preceding[-1] in _FOOD_VERBS:
        return EntityType.FOOD.value

    if match.label.split()[0].casefold() in FIRST_NAMES:
        return EntityType.PERSON.value

    return EntityType.CONCEPT.value


ENTITY_RULES: list[EntityRule] = [
    EntityRule(
        name="honorific_name",
        finder=regex_finder(
            rf"\b(?:Mr|Mrs|Ms|Dr|Prof|Sir|Madam|Miss)\.?\s+(?P<name>{_CAP_RUN})",
            group="name",
        ),
        confidence=PATTERN_CONFIDENCE,
        entity_type=EntityType.PERSON.value,
    ),
    EntityRule(
        name="organization_suffix",
        finder=regex_finder(
            rf"\b{_CAP_WORD}(?:\s+{_CAP_WORD}){{0,2}}\s+"
            r"(?:Inc|Corp|LLC|Ltd|Company|University|School|College)\b",
            trim=True,
        ),
        confidence=PATTERN_CONFIDENCE,
        entity_type=EntityType.ORGANIZATION.value,
    ),
    EntityRule(
        name="organization_lexicon",
        finder=lexicon_finder(ORGANIZATIONS, ignore_case=False),
        confidence=PATTERN_CONFIDENCE,
        entity_type=EntityType.ORGANIZATION.value,
    ),
    EntityRule(
        name="location_suffix",
        finder=regex_finder(
            rf"\b{_CAP_WORD}(?:\s+{_CAP_WORD}){{0,2}}\s+"
            r"(?:City|State|Country|Street|Avenue|Road|Place|Park)\b",
            trim=True,
        ),
        confidence=PATTERN_CONFIDENCE,
        entity_type=EntityType.LOCATION.value,
    ),
    EntityRule(
        name="location_lexicon",
        finder=lexicon_finder(LOCATIONS, ignore_case=False),
        confidence=PATTERN_CONFIDENCE,
        entity_type=EntityType.LOCATION.value,
    ),
    EntityRule(
        name="food_lexicon",
        finder=lexicon_finder(FOODS, ignore_case=True),
        confidence=PATTERN_CONFIDENCE,
        entity_type=EntityType.FOOD.value,
    ),
    EntityRule(
        name="technology_lexicon",
        finder=lexicon_finder(TECHNOLOGY, ignore_case=True),
        confidence=PATTERN_CONFIDENCE,
        entity_type=EntityType.TECHNOLOGY.value,
    ),
    EntityRule(
        name="object_lexicon",
        finder=lexicon_finder(OBJECTS, ignore_case=True),
        confidence=PATTERN_CONFIDENCE,
        entity_type=EntityType.OBJECT.value,
    ),
    EntityRule(
        name="capitalized_phrase",
        finder=capitalized_finder,
        confidence=CAPITALIZED_GUESS_CONFIDENCE,
        resolve_type=guess_capitalized_type,
        flags=("guessed",),
    ),
    EntityRule(
        name="common_noun",
        finder=common_noun_finder,
        confidence=COMMON_NOUN_CONFIDENCE,
        entity_type=EntityType.OBJECT.value,
        flags=("common_noun",),
    ),
]


class PatternEntityExtractor(LoggerMixin):
    """
    Entity extractor driven by an ordered rule battery.

    Args:
        rules: Rule battery, highest priority first (default ``ENTITY_RULES``)
    """

    def __init__(self, rules: list[EntityRule] | None = None) -> None:
        self.rules = list(rules if rules is not None else ENTITY_RULES)

    def scan(self, text: str) -> list[list[RawMatch]]:
        """
        Run every rule over the text.

        Rules only read the immutable text, so this phase is independent
        per rule; claiming happens afterwards in ``extract``.
        """
        return [list(rule.finder(text)) for rule in self.rules]

    def extract(self, text: str) -> list[EntityCandidate]:
        """
        Extract entity candidates in discovery order.

        Args:
            text: Normalized text

        Returns:
            Unfiltered candidates, one per claimed case-folded label
        """
        if not text or not text.strip():
            return []

        sentences = split_sentences(text)
        claimed_labels: set[str] = set()
        claimed_spans: list[tuple[int, int]] = []
        entities: list[EntityCandidate] = []

        for rule, matches in zip(self.rules, self.scan(text)):
            for match in matches:
                key = casefold_label(match.label)
                if len(key) <= 1:
                    continue
                if key in claimed_labels:
                    # a repeat still blocks later rules from reusing its span
                    claimed_spans.append((match.start, match.end))
                    continue
                if any(match.start < end and start < match.end for start, end in claimed_spans):
                    continue

                claimed_labels.add(key)
                claimed_spans.append((match.start, match.end))

                properties = {
                    "sentence": sentence_at(sentences, match.start),
                    "extracted_by": EXTRACTED_BY,
                    "rule": rule.name,
                }
                properties.update({flag: True for flag in rule.flags})

                entities.append(
                    EntityCandidate(
                        label=match.label,
                        entity_type=rule.type_for(text, match),
                        confidence=rule.confidence,
                        properties=properties,
                    )
                )

        self.logger.debug(
            "Entities extracted",
            count=len(entities),
            entities=[f"{e.label} ({e.entity_type})" for e in entities],
        )
        return entities
