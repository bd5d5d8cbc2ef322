"""
Text normalization.

Cleans raw text into the canonical form every extractor works on.
"""

import re

# Anything that is not a letter, digit, whitespace or whitelisted punctuation.
_DISALLOWED = re.compile(r"""[^\w\s.,!?;:'"()\-]|_""")
_WHITESPACE = re.compile(r"\s+")
_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


def normalize(raw: str) -> str:
    """
    Canonicalize raw text.

    Collapses all whitespace runs (newlines, tabs) to single spaces,
    replaces characters outside the letter/digit/punctuation whitelist
    with a space, and trims. An empty return value means there is
    nothing to extract.
    """
    if not raw:
        return ""
    text = _DISALLOWED.sub(" ", raw)
    return _WHITESPACE.sub(" ", text).strip()


def split_sentences(text: str) -> list[tuple[int, str]]:
    """
    Split normalized text into sentences.

    Returns:
        List of (start offset, sentence) pairs; offsets index into ``text``
    """
    sentences = []
    start = 0
    for match in _SENTENCE_END.finditer(text):
        sentences.append((start, text[start:match.start()]))
        start = match.end()
    if start < len(text):
        sentences.append((start, text[start:]))
    return sentences


def sentence_at(sentences: list[tuple[int, str]], offset: int) -> str:
    """Return the sentence containing ``offset``."""
    current = ""
    for start, sentence in sentences:
        if start > offset:
            break
        current = sentence
    return current
