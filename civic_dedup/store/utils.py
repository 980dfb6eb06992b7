"""Row parsing and display helpers for stored issues."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from civic_dedup.models import IssueSummary
from civic_dedup.store.base import IssueStoreError

ISSUE_FIELDS = (
    "id", "title", "description", "location", "image",
    "created_at", "created_by", "category", "status",
)


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC.

    Raises:
        ValueError: If ``value`` is not a timestamp.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    else:
        raise ValueError(f"not a timestamp: {value!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def issue_from_row(row: Dict[str, Any]) -> IssueSummary:
    """Build an ``IssueSummary`` from a store row.

    Raises:
        IssueStoreError: If the row lacks an id or a valid ``created_at``.
    """
    if not isinstance(row, dict):
        raise IssueStoreError(f"Malformed issue row: expected object, got {type(row).__name__}")
    if row.get("id") in (None, ""):
        raise IssueStoreError("Malformed issue row: missing id")
    try:
        created_at = parse_timestamp(row.get("created_at"))
    except ValueError as e:
        raise IssueStoreError(f"Malformed issue row {row.get('id')}: {e}") from e

    return IssueSummary(
        id=str(row["id"]),
        title=row.get("title") or "",
        description=row.get("description") or "",
        location=row.get("location") or "",
        created_at=created_at,
        image=_optional_str(row.get("image")),
        category=_optional_str(row.get("category")),
        created_by=_optional_str(row.get("created_by")),
        status=_optional_str(row.get("status")),
    )


def format_time_ago(created_at: datetime, now: Optional[datetime] = None) -> str:
    """Short relative age of an issue, as shown next to a possible duplicate."""
    now = now or datetime.now(timezone.utc)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    diff_days = math.ceil(abs((now - created_at).total_seconds()) / 86400)

    if diff_days == 0:
        return "today"
    if diff_days == 1:
        return "1 day ago"
    if diff_days < 7:
        return f"{diff_days} days ago"
    if diff_days < 30:
        weeks = math.ceil(diff_days / 7)
        return f"{weeks} week{'s' if weeks > 1 else ''} ago"
    return created_at.date().isoformat()
