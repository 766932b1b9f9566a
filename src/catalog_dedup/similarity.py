"""String similarity primitives for duplicate detection.

- ``Normalizer`` / ``normalize``: canonical comparable form of a display name
- ``levenshtein``: single-character edit distance
- ``jaccard``: word-set overlap, good for reordered words
  ("Bench Press Barbell" vs "Barbell Bench Press")
"""

from __future__ import annotations

import re
from typing import Mapping

from .config import DEFAULT_ABBREVIATIONS

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")


class Normalizer:
    """Lowercase, strip punctuation, collapse whitespace, expand abbreviations.

    Pure and total: any string maps to a (possibly empty) normalized string, and
    normalizing twice gives the same result as normalizing once provided no
    expansion contains another abbreviation (``DetectionConfig`` enforces that).
    """

    def __init__(self, abbreviations: Mapping[str, str] | None = None) -> None:
        self.abbreviations = dict(DEFAULT_ABBREVIATIONS if abbreviations is None else abbreviations)

    def __call__(self, name: str) -> str:
        lowered = name.lower()
        # str.lower() can yield non-ASCII letters, which are treated as punctuation.
        cleaned = _NON_ALNUM_RE.sub(" ", lowered)
        words = cleaned.split()
        return " ".join(self.abbreviations.get(w, w) for w in words)


_default_normalizer = Normalizer()


def normalize(name: str, abbreviations: Mapping[str, str] | None = None) -> str:
    if abbreviations is None:
        return _default_normalizer(name)
    return Normalizer(abbreviations)(name)


def tokens(normalized: str) -> frozenset[str]:
    return frozenset(normalized.split())


def levenshtein(a: str, b: str) -> int:
    """Minimum single-character insertions, deletions or substitutions to turn a into b.

    Same recurrence as the full (len(b)+1) x (len(a)+1) table, kept to two rows
    over the shorter string.
    """
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(1 + min(previous[j - 1], previous[j], current[j - 1]))
        previous = current
    return previous[-1]


def jaccard(s1: str, s2: str) -> float:
    """|intersection| / |union| of the whitespace-delimited word sets.

    Two empty strings are identical empty sets and score 1.0.
    """
    a = tokens(s1)
    b = tokens(s2)
    union = a | b
    if not union:
        return 1.0
    return len(a & b) / len(union)
