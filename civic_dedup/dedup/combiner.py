"""Weighted combination of signal scores and the duplicate decision."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from civic_dedup.config import DetectionConfig
from civic_dedup.dedup.result import (
    DuplicateCandidate,
    DuplicateDetectionResult,
    MatchType,
)
from civic_dedup.dedup.scorers import SignalScorer, build_default_scorers
from civic_dedup.models import IssueSummary, ReportDraft
from civic_dedup.utils.logger import log_debug, log_duplicate_detection

# Tie-break order when two signals contribute equally.
_SIGNAL_PRIORITY = ("location", "text", "image", "category")


def dominant_match_type(contributions: Dict[str, float]) -> MatchType:
    """Tag a candidate by the signal that contributed most to its score.

    ``BOTH`` is used when location and photo both contributed.
    """
    if contributions.get("location", 0.0) > 0 and contributions.get("image", 0.0) > 0:
        return MatchType.BOTH

    best_name = "location"
    best_value = -1.0
    for name in _SIGNAL_PRIORITY:
        value = contributions.get(name, 0.0)
        if value > best_value:
            best_name, best_value = name, value
    return MatchType(best_name)


class ScoreCombiner:
    """Score candidates against a report and keep the confident matches.

    Args:
        config: Weights, threshold and result cap.
        scorers: Signals to evaluate. Defaults to location, text and
            category built from ``config``. A scorer whose name has no
            weight in ``config.weights()`` is ignored.
    """

    def __init__(
        self,
        config: Optional[DetectionConfig] = None,
        scorers: Optional[Sequence[SignalScorer]] = None,
    ):
        self.config = config or DetectionConfig()
        self.scorers = list(scorers) if scorers is not None else build_default_scorers(self.config)
        self.weights = self.config.weights()

    def score_candidate(self, report: ReportDraft, candidate: IssueSummary) -> DuplicateCandidate:
        """Composite score and breakdown for one candidate."""
        scores: Dict[str, float] = {}
        contributions: Dict[str, float] = {}
        for scorer in self.scorers:
            weight = self.weights.get(scorer.name)
            if weight is None:
                continue
            sub_score = scorer.score(report, candidate)
            scores[scorer.name] = sub_score
            contributions[scorer.name] = weight * sub_score

        composite = min(1.0, max(0.0, sum(contributions.values())))
        return DuplicateCandidate.from_issue(
            candidate,
            similarity_score=composite,
            match_type=dominant_match_type(contributions),
            scores=scores,
        )

    def combine(
        self, report: ReportDraft, candidates: Sequence[IssueSummary]
    ) -> DuplicateDetectionResult:
        """Rank candidates scoring strictly above the threshold.

        Returns:
            ``DuplicateDetectionResult`` with at most ``max_results``
            duplicates, best first, and the best score as confidence.
        """
        retained: List[DuplicateCandidate] = []
        for candidate in candidates:
            scored = self.score_candidate(report, candidate)
            log_debug(
                "Candidate scored",
                issue_id=candidate.id,
                score=round(scored.similarity_score, 4),
                breakdown=scored.scores,
            )
            if scored.similarity_score > self.config.duplicate_threshold:
                retained.append(scored)

        retained.sort(key=lambda d: d.similarity_score, reverse=True)
        top = retained[: self.config.max_results]
        for duplicate in top:
            log_duplicate_detection(
                duplicate.similarity_score,
                duplicate.id,
                match_type=duplicate.match_type.value,
            )

        if not top:
            return DuplicateDetectionResult.no_duplicate()
        return DuplicateDetectionResult(
            is_duplicate=True,
            duplicates=top,
            confidence=top[0].similarity_score,
        )
