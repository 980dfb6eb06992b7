"""Photo similarity between a new report and its candidates.

Each image is analyzed once and the analyses are compared like descriptions:
caption overlap plus a bonus when the suggested categories agree. Analysis
failures score the affected candidate 0 instead of failing the check.
"""

from __future__ import annotations

import asyncio
from typing import Dict, Optional, Protocol, Sequence

from civic_dedup.config import DetectionConfig
from civic_dedup.dedup.text import text_similarity
from civic_dedup.models import IssueSummary, ReportDraft
from civic_dedup.utils.logger import log_warning
from civic_dedup.vision.client import ImageAnalysis


class ImageAnalyzer(Protocol):
    async def analyze_image(
        self, content: Optional[bytes] = None, image_uri: Optional[str] = None
    ) -> ImageAnalysis:
        ...


def compare_analyses(
    a: ImageAnalysis, b: ImageAnalysis, config: DetectionConfig
) -> float:
    text_score = text_similarity(
        a.description,
        b.description,
        keywords=config.keywords,
        keyword_weight=config.keyword_weight,
        min_length=config.min_token_length,
    )
    same_category = a.suggested_category and a.suggested_category == b.suggested_category
    return min(text_score + (config.category_bonus if same_category else 0.0), 1.0)


async def compute_image_similarities(
    analyzer: ImageAnalyzer,
    report: ReportDraft,
    candidates: Sequence[IssueSummary],
    config: DetectionConfig,
) -> Dict[str, float]:
    """Similarity per candidate id for candidates that have a photo.

    Returns an empty mapping when the report has no photo or the report's
    own photo cannot be analyzed.
    """
    if not report.image:
        return {}

    with_images = [c for c in candidates if c.image]
    if not with_images:
        return {}

    results = await asyncio.gather(
        analyzer.analyze_image(content=report.image),
        *(analyzer.analyze_image(image_uri=c.image) for c in with_images),
        return_exceptions=True,
    )
    new_analysis, candidate_analyses = results[0], results[1:]
    if isinstance(new_analysis, Exception):
        log_warning("Report image could not be analyzed", error=str(new_analysis))
        return {}

    similarities: Dict[str, float] = {}
    for candidate, analysis in zip(with_images, candidate_analyses):
        if isinstance(analysis, Exception):
            log_warning("Candidate image could not be analyzed", issue_id=candidate.id, error=str(analysis))
            continue
        similarities[candidate.id] = compare_analyses(new_analysis, analysis, config)
    return similarities
