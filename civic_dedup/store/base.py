"""Abstract issue store consumed by the candidate fetcher."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from civic_dedup.models import IssueSummary


class IssueStoreError(Exception):
    """The issue store was unreachable or returned malformed data."""


class IssueStore(ABC):
    """Read access to recently reported issues."""

    @abstractmethod
    async def fetch_recent_open_issues(
        self, since: datetime, exclude_status: str, limit: int
    ) -> List[IssueSummary]:
        """Return issues created at or after ``since``, newest first.

        Args:
            since: Oldest creation time to include (timezone-aware).
            exclude_status: Status whose issues must be left out.
            limit: Maximum number of issues to return.

        Raises:
            IssueStoreError: If the store cannot be read.
        """
