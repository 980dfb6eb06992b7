"""Per-signal similarity scorers.

Each scorer implements the ``SignalScorer`` protocol: a ``score`` method that
compares the report being submitted with one candidate issue and returns a
sub-score in ``[0, 1]``. The ``ScoreCombiner`` weighs sub-scores by signal
name, so a new signal only needs a scorer and a weight.
"""

from __future__ import annotations

import abc
from typing import Collection, Dict, Optional

from civic_dedup.config import DEFAULT_KEYWORDS, DetectionConfig
from civic_dedup.dedup.geo import extract_coordinates, haversine_km
from civic_dedup.dedup.text import text_similarity
from civic_dedup.models import IssueSummary, ReportDraft

# ---------------------------------------------------------------------------
# Base protocol
# ---------------------------------------------------------------------------


class SignalScorer(abc.ABC):
    """Abstract base for similarity signals."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Signal name; must match a key of ``DetectionConfig.weights()``."""

    @abc.abstractmethod
    def score(self, report: ReportDraft, candidate: IssueSummary) -> float:
        """Compare the new report with one candidate.

        Returns:
            A sub-score in ``[0, 1]``. Missing inputs score ``0.0``.
        """


# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------


def proximity_similarity(distance_km: float, radius_km: float = 0.05) -> float:
    """Linear falloff from 1 at the same spot to 0 at ``radius_km`` and beyond."""
    if distance_km < 0 or distance_km > radius_km:
        return 0.0
    return max(0.0, 1.0 - distance_km / radius_km)


class LocationScorer(SignalScorer):
    """Co-location of the report and the candidate.

    The candidate's coordinates are recovered from its location text; if that
    fails, or the report has no coordinates, the signal is 0.
    """

    def __init__(self, radius_km: float = 0.05):
        self.radius_km = radius_km

    @property
    def name(self) -> str:
        return "location"

    def score(self, report: ReportDraft, candidate: IssueSummary) -> float:
        if report.coordinates is None:
            return 0.0
        candidate_coords = extract_coordinates(candidate.location)
        if candidate_coords is None:
            return 0.0
        distance = haversine_km(report.coordinates, candidate_coords)
        return proximity_similarity(distance, self.radius_km)


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


class TextScorer(SignalScorer):
    """Keyword-weighted token overlap of the two descriptions."""

    def __init__(
        self,
        keywords: Collection[str] = DEFAULT_KEYWORDS,
        keyword_weight: float = 2.0,
        min_token_length: int = 3,
    ):
        self.keywords = frozenset(keywords)
        self.keyword_weight = keyword_weight
        self.min_token_length = min_token_length

    @property
    def name(self) -> str:
        return "text"

    def score(self, report: ReportDraft, candidate: IssueSummary) -> float:
        return text_similarity(
            report.description,
            candidate.description,
            keywords=self.keywords,
            keyword_weight=self.keyword_weight,
            min_length=self.min_token_length,
        )


# ---------------------------------------------------------------------------
# Category
# ---------------------------------------------------------------------------


def category_bonus(
    category1: Optional[str], category2: Optional[str], bonus: float = 0.3
) -> float:
    """``bonus`` when both categories are present and equal, else 0."""
    if not category1 or not category2:
        return 0.0
    return bonus if category1 == category2 else 0.0


class CategoryScorer(SignalScorer):
    """Exact category equality. Related categories get no partial credit."""

    def __init__(self, bonus: float = 0.3):
        self.bonus = bonus

    @property
    def name(self) -> str:
        return "category"

    def score(self, report: ReportDraft, candidate: IssueSummary) -> float:
        return category_bonus(report.category, candidate.category, self.bonus)


# ---------------------------------------------------------------------------
# Image (optional)
# ---------------------------------------------------------------------------


class ImageScorer(SignalScorer):
    """Photo similarity, precomputed per candidate id.

    Image comparison needs network calls, so the detector computes the
    similarities up front (see ``DuplicateDetector``) and this scorer only
    looks them up. Candidates without an entry score 0.
    """

    def __init__(self, similarities: Optional[Dict[str, float]] = None):
        self.similarities = dict(similarities or {})

    @property
    def name(self) -> str:
        return "image"

    def score(self, report: ReportDraft, candidate: IssueSummary) -> float:
        return min(1.0, max(0.0, self.similarities.get(candidate.id, 0.0)))


def build_default_scorers(config: DetectionConfig) -> list:
    """Build the location, text and category scorers from the tunables."""
    return [
        LocationScorer(radius_km=config.proximity_radius_km),
        TextScorer(
            keywords=config.keywords,
            keyword_weight=config.keyword_weight,
            min_token_length=config.min_token_length,
        ),
        CategoryScorer(bonus=config.category_bonus),
    ]
