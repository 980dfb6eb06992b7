"""In-memory issue store, used by the CLI with a JSON export and by tests."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from civic_dedup.models import IssueSummary
from civic_dedup.store.base import IssueStore, IssueStoreError
from civic_dedup.store.utils import issue_from_row


class InMemoryIssueStore(IssueStore):
    """Issue store backed by a list of summaries."""

    def __init__(self, issues: Iterable[IssueSummary] = ()):
        self.issues: List[IssueSummary] = list(issues)
        self.calls = 0

    @classmethod
    def from_rows(cls, rows: Iterable[Dict[str, Any]]) -> "InMemoryIssueStore":
        return cls(issue_from_row(row) for row in rows)

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "InMemoryIssueStore":
        """Load a JSON array of issue rows (e.g. a table export).

        Raises:
            IssueStoreError: If the file cannot be read or parsed.
        """
        try:
            rows = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise IssueStoreError(f"Cannot load issues from {path}: {e}") from e
        if not isinstance(rows, list):
            raise IssueStoreError(f"Expected a JSON array of issues in {path}")
        return cls.from_rows(rows)

    async def fetch_recent_open_issues(
        self, since: datetime, exclude_status: str, limit: int
    ) -> List[IssueSummary]:
        self.calls += 1
        matching = [
            issue for issue in self.issues
            if issue.created_at >= since and (issue.status or "").lower() != exclude_status
        ]
        matching.sort(key=lambda issue: issue.created_at, reverse=True)
        return matching[:limit]
