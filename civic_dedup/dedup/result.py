"""Data classes for duplicate detection results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from civic_dedup.models import IssueSummary


class MatchType(str, Enum):
    """Signal that contributed most to a candidate's composite score."""

    LOCATION = "location"
    TEXT = "text"
    CATEGORY = "category"
    IMAGE = "image"
    BOTH = "both"  # location and image both contributed


@dataclass(frozen=True)
class DuplicateCandidate:
    """One existing issue retained as a likely duplicate.

    Attributes:
        id: Identifier of the existing issue.
        similarity_score: Composite score in ``[0, 1]``.
        match_type: Dominant signal behind the score.
        scores: Raw sub-score per signal (``"location"``, ``"text"``, ...),
            kept so the caller can explain why the match was made.
    """

    id: str
    title: str
    description: str
    location: str
    created_at: datetime
    similarity_score: float
    match_type: MatchType
    image: Optional[str] = None
    category: Optional[str] = None
    created_by: Optional[str] = None
    scores: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_issue(
        cls,
        issue: IssueSummary,
        similarity_score: float,
        match_type: MatchType,
        scores: Dict[str, float],
    ) -> "DuplicateCandidate":
        return cls(
            id=issue.id,
            title=issue.title,
            description=issue.description,
            location=issue.location,
            created_at=issue.created_at,
            similarity_score=similarity_score,
            match_type=match_type,
            image=issue.image,
            category=issue.category,
            created_by=issue.created_by,
            scores=dict(scores),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "image": self.image,
            "category": self.category,
            "created_at": self.created_at.isoformat(),
            "created_by": self.created_by,
            "similarity_score": self.similarity_score,
            "match_type": self.match_type.value,
            "scores": dict(self.scores),
        }


@dataclass(frozen=True)
class DuplicateDetectionResult:
    """Verdict of one duplicate check.

    Attributes:
        is_duplicate: Whether at least one candidate cleared the threshold.
        duplicates: Retained candidates, best first, already truncated.
        confidence: Score of the best candidate, or ``0.0``.
    """

    is_duplicate: bool
    duplicates: List[DuplicateCandidate] = field(default_factory=list)
    confidence: float = 0.0

    @classmethod
    def no_duplicate(cls) -> "DuplicateDetectionResult":
        """The fail-open verdict used for empty stores, timeouts and errors."""
        return cls(is_duplicate=False, duplicates=[], confidence=0.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_duplicate": self.is_duplicate,
            "confidence": self.confidence,
            "duplicates": [d.to_dict() for d in self.duplicates],
        }
