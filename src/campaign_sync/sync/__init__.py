"""
Sync pipeline: persistence, coordinator, summaries and caller-side pagination.
"""

from campaign_sync.sync.coordinator import SyncCoordinator
from campaign_sync.sync.persistence import PersistResult, RecipientPersister, build_address_key, dedupe_recipients
from campaign_sync.sync.session import SyncResult, describe_failure, next_cursor, sync_all, trigger_sync
from campaign_sync.sync.summary import FailedDownload, ProcessedRange, SyncSummary

__all__ = [
    "SyncCoordinator",
    "RecipientPersister",
    "PersistResult",
    "build_address_key",
    "dedupe_recipients",
    "SyncSummary",
    "FailedDownload",
    "ProcessedRange",
    "SyncResult",
    "trigger_sync",
    "sync_all",
    "next_cursor",
    "describe_failure",
]
