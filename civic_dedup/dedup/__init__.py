"""Duplicate-issue detection for new civic reports.

Candidates are fetched from the issue store, scored on location, text and
category (and optionally photo) signals, and the confident matches are
returned best first.
"""

from civic_dedup.dedup.result import DuplicateCandidate, DuplicateDetectionResult, MatchType
from civic_dedup.dedup.detector import DuplicateDetector, check_for_duplicates

__all__ = [
    "DuplicateCandidate",
    "DuplicateDetectionResult",
    "DuplicateDetector",
    "MatchType",
    "check_for_duplicates",
]
