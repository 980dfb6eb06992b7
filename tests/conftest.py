"""Pytest configuration and fixtures for civic-dedup tests."""

import pytest
from datetime import datetime, timedelta, timezone

# Add the project root to the Python path
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from civic_dedup.config import DetectionConfig
from civic_dedup.models import IssueSummary, ReportDraft
from civic_dedup.store.memory import InMemoryIssueStore
from tests.helpers import MAIN_STREET


@pytest.fixture
def now():
    """Fixed clock for window calculations."""
    return datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def detection_config():
    """Default detection tunables."""
    return DetectionConfig()


@pytest.fixture
def make_issue(now):
    """Factory for candidate issues created one hour before ``now`` by default."""
    counter = {"n": 0}

    def _make(
        description="Broken streetlight on Main Street",
        location="40.7129,-74.0061",
        category=None,
        status="reported",
        age=timedelta(hours=1),
        issue_id=None,
        image=None,
    ):
        counter["n"] += 1
        return IssueSummary(
            id=issue_id or f"issue-{counter['n']}",
            title=description[:40],
            description=description,
            location=location,
            created_at=now - age,
            image=image,
            category=category,
            created_by="user-1",
            status=status,
        )

    return _make


@pytest.fixture
def streetlight_report():
    """New report matching example scenario 1."""
    return ReportDraft(
        description="Broken streetlight on Main Street",
        location="Main Street, Downtown",
        coordinates=MAIN_STREET,
    )


@pytest.fixture
def memory_store(make_issue):
    """Store holding one near-identical streetlight report."""
    return InMemoryIssueStore([make_issue(issue_id="existing-streetlight")])
