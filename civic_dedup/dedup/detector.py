"""Orchestrator for the duplicate check run before a report is accepted.

``DuplicateDetector.check`` races candidate retrieval and scoring against a
fixed deadline. The check is advisory and fails open: a timeout, an issue
store failure or any scoring error yields the "no duplicate" verdict, so a
broken check can never stop a citizen from filing a report.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime
from typing import Optional

from civic_dedup.config import DetectionConfig
from civic_dedup.dedup.combiner import ScoreCombiner
from civic_dedup.dedup.fetcher import CandidateFetcher
from civic_dedup.dedup.image import ImageAnalyzer, compute_image_similarities
from civic_dedup.dedup.result import DuplicateDetectionResult
from civic_dedup.dedup.scorers import ImageScorer, build_default_scorers
from civic_dedup.models import Coordinates, ReportDraft
from civic_dedup.performance import PerformanceMetrics, get_performance_metrics
from civic_dedup.store.base import IssueStore, IssueStoreError
from civic_dedup.utils.logger import log_debug, log_error, log_info, log_warning


class DuplicateDetector:
    """Check new reports against recent open issues.

    Args:
        store: Where candidate issues are read from.
        config: Detection tunables. Defaults to ``DetectionConfig()``.
        image_analyzer: Annotates photos when image similarity is enabled.
        metrics: Timing sink. Defaults to the global instance.

    Usage::

        detector = DuplicateDetector(store)
        result = await detector.check(ReportDraft(description, location, coords))
        if result.is_duplicate:
            # ask the reporter whether to proceed anyway
            ...
    """

    def __init__(
        self,
        store: IssueStore,
        config: Optional[DetectionConfig] = None,
        image_analyzer: Optional[ImageAnalyzer] = None,
        metrics: Optional[PerformanceMetrics] = None,
    ):
        self.config = config or DetectionConfig()
        self.fetcher = CandidateFetcher(store, self.config)
        self.image_analyzer = image_analyzer
        self.metrics = metrics or get_performance_metrics()

    async def check(
        self, report: ReportDraft, now: Optional[datetime] = None
    ) -> DuplicateDetectionResult:
        """Run the check under the deadline.

        Returns:
            The ranked verdict, or ``DuplicateDetectionResult.no_duplicate()``
            when the deadline passes or anything in the pipeline fails.
        """
        log_debug("Starting duplicate check", timeout_seconds=self.config.timeout_seconds)
        start = time.perf_counter()
        try:
            result = await asyncio.wait_for(
                self._run_pipeline(report, now), timeout=self.config.timeout_seconds
            )
        except asyncio.TimeoutError:
            log_warning(
                "Duplicate check timed out, proceeding without duplicates",
                timeout_seconds=self.config.timeout_seconds,
            )
            result = DuplicateDetectionResult.no_duplicate()
        except IssueStoreError as e:
            log_error("Issue store unavailable, proceeding without duplicates", error=str(e))
            result = DuplicateDetectionResult.no_duplicate()
        except Exception as e:
            log_error(
                "Duplicate check failed, proceeding without duplicates",
                error=str(e),
                error_type=type(e).__name__,
            )
            result = DuplicateDetectionResult.no_duplicate()
        finally:
            self.metrics.record("duplicate_check", time.perf_counter() - start)

        log_info(
            "Duplicate check complete",
            is_duplicate=result.is_duplicate,
            duplicates=len(result.duplicates),
            confidence=round(result.confidence, 4),
        )
        return result

    async def _run_pipeline(
        self, report: ReportDraft, now: Optional[datetime]
    ) -> DuplicateDetectionResult:
        with self.metrics.timer("fetch_candidates"):
            candidates = await self.fetcher.fetch(now)
        if not candidates:
            return DuplicateDetectionResult.no_duplicate()

        scorers = build_default_scorers(self.config)
        if self.config.image_similarity_enabled and self.image_analyzer is not None and report.image:
            with self.metrics.timer("image_similarity"):
                similarities = await compute_image_similarities(
                    self.image_analyzer, report, candidates, self.config
                )
            scorers.append(ImageScorer(similarities))

        with self.metrics.timer("score_candidates"):
            return ScoreCombiner(self.config, scorers).combine(report, candidates)


async def check_for_duplicates(
    description: str,
    location: str,
    coordinates: Optional[Coordinates] = None,
    image: Optional[bytes] = None,
    category: Optional[str] = None,
    *,
    store: IssueStore,
    config: Optional[DetectionConfig] = None,
    image_analyzer: Optional[ImageAnalyzer] = None,
    now: Optional[datetime] = None,
) -> DuplicateDetectionResult:
    """Check a report about to be submitted for likely duplicates.

    The photo is only scored when image similarity is enabled in ``config``
    and an ``image_analyzer`` is given. Never raises for pipeline failures.
    """
    report = ReportDraft(
        description=description or "",
        location=location or "",
        coordinates=coordinates,
        image=image,
        category=category,
    )
    detector = DuplicateDetector(store, config=config, image_analyzer=image_analyzer)
    return await detector.check(report, now=now)
