"""Issue store backends the duplicate checker reads candidates from."""

from civic_dedup.store.base import IssueStore, IssueStoreError
from civic_dedup.store.memory import InMemoryIssueStore
from civic_dedup.store.supabase import SupabaseIssueStore

__all__ = ["IssueStore", "IssueStoreError", "InMemoryIssueStore", "SupabaseIssueStore"]
