"""Keyword-weighted word overlap between two report descriptions."""

from __future__ import annotations

from typing import Collection, FrozenSet, Optional

from civic_dedup.config import DEFAULT_KEYWORDS


def tokenize(text: Optional[str], min_length: int = 3) -> FrozenSet[str]:
    """Lowercased whitespace tokens at least ``min_length`` characters long."""
    if not text:
        return frozenset()
    return frozenset(t for t in text.lower().split() if len(t) >= min_length)


def text_similarity(
    text1: Optional[str],
    text2: Optional[str],
    keywords: Collection[str] = DEFAULT_KEYWORDS,
    keyword_weight: float = 2.0,
    min_length: int = 3,
) -> float:
    """Similarity in ``[0, 1]`` between two descriptions.

    Returns the larger of the plain Jaccard index over the token sets and a
    weighted Jaccard index in which domain keywords ("pothole", "leak", ...)
    count ``keyword_weight`` times. Shared civic vocabulary is a strong signal
    even when the rest of the wording differs.
    """
    words1 = tokenize(text1, min_length)
    words2 = tokenize(text2, min_length)
    if not words1 or not words2:
        return 0.0

    intersection = words1 & words2
    union = words1 | words2
    basic = len(intersection) / len(union)

    keyword_set = frozenset(keywords)

    def weight(word: str) -> float:
        return keyword_weight if word in keyword_set else 1.0

    weighted = sum(weight(w) for w in intersection) / sum(weight(w) for w in union)
    return max(basic, weighted)
