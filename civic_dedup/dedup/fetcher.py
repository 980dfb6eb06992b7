"""Bounded, time-windowed candidate retrieval."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from civic_dedup.config import DetectionConfig
from civic_dedup.models import IssueSummary
from civic_dedup.store.base import IssueStore
from civic_dedup.utils.logger import log_debug


class CandidateFetcher:
    """Fetch the open issues a new report may duplicate.

    The store is asked for at most ``max_candidates`` issues created within
    ``window_days`` and not in ``excluded_status``. The same bounds are
    re-applied to the response so a lenient store cannot grow the scoring
    workload.
    """

    def __init__(self, store: IssueStore, config: Optional[DetectionConfig] = None):
        self.store = store
        self.config = config or DetectionConfig()

    def window_start(self, now: datetime) -> datetime:
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now - timedelta(days=self.config.window_days)

    async def fetch(self, now: Optional[datetime] = None) -> List[IssueSummary]:
        """Return candidates, newest first.

        Raises:
            IssueStoreError: Propagated from the store.
        """
        since = self.window_start(now or datetime.now(timezone.utc))
        limit = self.config.max_candidates
        excluded = self.config.excluded_status

        issues = await self.store.fetch_recent_open_issues(since, excluded, limit)

        candidates = [
            issue for issue in issues
            if issue.created_at >= since and (issue.status or "").lower() != excluded
        ]
        candidates.sort(key=lambda issue: issue.created_at, reverse=True)
        candidates = candidates[:limit]

        log_debug(
            "Candidates fetched",
            since=since.isoformat(),
            returned=len(issues),
            kept=len(candidates),
        )
        return candidates
