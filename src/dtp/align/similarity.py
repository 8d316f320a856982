"""Text comparison primitives for alignment.

Anchors are tokens that usually survive translation unchanged (numbers,
email addresses, URLs, proper nouns). They are the strongest signal that a
source paragraph and a translated paragraph correspond.

The proper-noun heuristic looks for a capitalized word that is the second
word of a sentence. It only works for Latin scripts with capitalization
conventions and will miss or misfire on other scripts and on languages that
capitalize common nouns.
"""

from __future__ import annotations

import re

import Levenshtein

from dtp.core.models import TranslatedParagraph

LONG_TEXT_LIMIT = 500
LENGTH_GAP_CUTOFF = 0.8

_WHITESPACE_RE = re.compile(r"\s+")
_LINE_RE = re.compile(r"\r?\n")

# Digits and word characters are ASCII only; whitespace stays Unicode
_DIGIT = "[0-9]"
_WORD = "[A-Za-z0-9_]"

_NUMBER_RE = re.compile(rf"{_DIGIT}+(?:[.,]{_DIGIT}+)*")
_EMAIL_RE = re.compile(rf"[A-Za-z0-9_.-]+@[A-Za-z0-9_.-]+\.{_WORD}+")
_URL_RE = re.compile(r"https?://\S+")
# Zero-width scan so that adjacent sentences each yield their candidate
_PROPER_NOUN_RE = re.compile(rf"(?=[.!?]\s+{_WORD}+\s+([A-Z][a-zÀ-ÿ]+))")


def normalize(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def split_into_paragraphs(text: str) -> list[TranslatedParagraph]:
    """Split a translation into trimmed, non-empty lines."""
    kept = [line.strip() for line in _LINE_RE.split(text) if line.strip()]
    return [TranslatedParagraph(index=i, text=line) for i, line in enumerate(kept)]


def extract_anchors(text: str) -> set[str]:
    """Collect translation-invariant tokens from text."""
    anchors: set[str] = set()
    anchors.update(_NUMBER_RE.findall(text))
    anchors.update(_EMAIL_RE.findall(text))
    anchors.update(_URL_RE.findall(text))
    anchors.update(_PROPER_NOUN_RE.findall(text))
    return anchors


def anchor_score(source: str, candidate: str) -> float:
    """Fraction of the source's anchors also found in the candidate (0 if none)."""
    source_anchors = extract_anchors(source)
    if not source_anchors:
        return 0.0
    candidate_anchors = extract_anchors(candidate)
    return len(source_anchors & candidate_anchors) / len(source_anchors)


def word_overlap(a: str, b: str) -> float:
    """Dice coefficient over lowercase whitespace-split word sets."""
    words_a = set(a.lower().split())
    words_b = set(b.lower().split())
    if not words_a and not words_b:
        return 0.0
    return 2 * len(words_a & words_b) / (len(words_a) + len(words_b))


def similarity(
    a: str,
    b: str,
    long_text_limit: int = LONG_TEXT_LIMIT,
    length_gap_cutoff: float = LENGTH_GAP_CUTOFF,
) -> float:
    """Similarity ratio in [0, 1].

    Levenshtein-based (1 - distance / longest length) for short strings; word
    overlap above ``long_text_limit`` characters to avoid quadratic cost.
    Pairs whose lengths differ by more than ``length_gap_cutoff`` of the longer
    one score 0 without further comparison.
    """
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0

    la, lb = len(a), len(b)
    longest = max(la, lb)
    if abs(la - lb) / longest > length_gap_cutoff:
        return 0.0

    if la > long_text_limit or lb > long_text_limit:
        return word_overlap(a, b)

    return 1 - Levenshtein.distance(a, b) / longest
