"""Unit tests for candidate retrieval."""

import pytest
from datetime import timedelta
from unittest.mock import AsyncMock

from civic_dedup.config import DetectionConfig
from civic_dedup.dedup.fetcher import CandidateFetcher
from civic_dedup.store.base import IssueStoreError
from civic_dedup.store.memory import InMemoryIssueStore

pytestmark = pytest.mark.unit


class TestCandidateFetcher:
    @pytest.mark.asyncio
    async def test_requests_window_status_and_limit(self, now, detection_config):
        store = AsyncMock()
        store.fetch_recent_open_issues.return_value = []

        await CandidateFetcher(store, detection_config).fetch(now)

        store.fetch_recent_open_issues.assert_awaited_once_with(
            now - timedelta(days=7), "resolved", 20
        )

    @pytest.mark.asyncio
    async def test_naive_now_is_treated_as_utc(self, now, detection_config):
        store = AsyncMock()
        store.fetch_recent_open_issues.return_value = []

        await CandidateFetcher(store, detection_config).fetch(now.replace(tzinfo=None))

        since = store.fetch_recent_open_issues.await_args.args[0]
        assert since == now - timedelta(days=7)

    @pytest.mark.asyncio
    async def test_filters_what_a_lenient_store_returns(self, now, make_issue, detection_config):
        fresh = make_issue(issue_id="fresh", age=timedelta(hours=2))
        newest = make_issue(issue_id="newest", age=timedelta(minutes=5))
        resolved = make_issue(issue_id="resolved", status="resolved")
        resolved_upper = make_issue(issue_id="resolved-upper", status="Resolved")
        stale = make_issue(issue_id="stale", age=timedelta(days=8))
        store = AsyncMock()
        store.fetch_recent_open_issues.return_value = [fresh, resolved, stale, newest, resolved_upper]

        candidates = await CandidateFetcher(store, detection_config).fetch(now)

        assert [c.id for c in candidates] == ["newest", "fresh"]

    @pytest.mark.asyncio
    async def test_caps_candidate_count(self, now, make_issue):
        issues = [make_issue(age=timedelta(minutes=i)) for i in range(30)]
        store = AsyncMock()
        store.fetch_recent_open_issues.return_value = issues

        candidates = await CandidateFetcher(store, DetectionConfig(max_candidates=5)).fetch(now)

        assert len(candidates) == 5
        assert candidates == issues[:5]

    @pytest.mark.asyncio
    async def test_issue_on_window_edge_is_kept(self, now, make_issue, detection_config):
        edge = make_issue(issue_id="edge", age=timedelta(days=7))
        candidates = await CandidateFetcher(InMemoryIssueStore([edge]), detection_config).fetch(now)
        assert [c.id for c in candidates] == ["edge"]

    @pytest.mark.asyncio
    async def test_store_error_propagates(self, now, detection_config):
        store = AsyncMock()
        store.fetch_recent_open_issues.side_effect = IssueStoreError("down")

        with pytest.raises(IssueStoreError):
            await CandidateFetcher(store, detection_config).fetch(now)

    def test_window_start(self, now):
        fetcher = CandidateFetcher(InMemoryIssueStore(), DetectionConfig(window_days=3))
        assert fetcher.window_start(now) == now - timedelta(days=3)
