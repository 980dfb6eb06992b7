"""Async issue store backed by the Supabase REST (PostgREST) API using httpx.

Usage::

    async with SupabaseIssueStore() as store:
        issues = await store.fetch_recent_open_issues(since, "resolved", 20)
"""
from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from civic_dedup.config import Config, get_config
from civic_dedup.models import IssueSummary
from civic_dedup.store.base import IssueStore, IssueStoreError
from civic_dedup.store.utils import ISSUE_FIELDS, issue_from_row
from civic_dedup.utils.logger import log_debug, log_error


class SupabaseIssueStore(IssueStore):
    """Read-only Supabase client for the issues table."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or get_config()
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Context manager entry - creates HTTP client."""
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.supabase_timeout),
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - closes HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> Dict[str, str]:
        key = self.config.supabase_anon_key
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Accept": "application/json",
        }

    def is_configured(self) -> bool:
        return bool(self.config.supabase_url and self.config.supabase_anon_key)

    def _url(self) -> str:
        return f"{self.config.supabase_url}/rest/v1/{self.config.supabase_issues_table}"

    @staticmethod
    def _params(since: datetime, exclude_status: str, limit: int) -> Dict[str, Any]:
        return {
            "select": ",".join(ISSUE_FIELDS),
            "created_at": f"gte.{since.isoformat()}",
            "status": f"neq.{exclude_status}",
            "order": "created_at.desc",
            "limit": str(limit),
        }

    async def fetch_recent_open_issues(
        self, since: datetime, exclude_status: str, limit: int
    ) -> List[IssueSummary]:
        """Fetch recent issues whose status differs from ``exclude_status``.

        Raises:
            IssueStoreError: On missing configuration, HTTP failure, or a
                response that is not a list of issue rows.
        """
        if not self.is_configured():
            raise IssueStoreError("Supabase store not configured (SUPABASE_URL / SUPABASE_ANON_KEY)")
        if not self._client:
            raise IssueStoreError("SupabaseIssueStore not initialized - use 'async with' context")

        try:
            resp = await self._client.get(
                self._url(),
                headers=self._headers(),
                params=self._params(since, exclude_status, limit),
            )
            resp.raise_for_status()
            rows = resp.json()
        except httpx.HTTPError as e:
            log_error("Issue store request failed", error=str(e))
            raise IssueStoreError(f"Issue store request failed: {e}") from e
        except ValueError as e:
            raise IssueStoreError(f"Issue store returned invalid JSON: {e}") from e

        if not isinstance(rows, list):
            raise IssueStoreError("Issue store returned a non-list payload")

        issues = [issue_from_row(row) for row in rows]
        log_debug("Issue store fetch completed", status_code=resp.status_code, issue_count=len(issues))
        return issues
