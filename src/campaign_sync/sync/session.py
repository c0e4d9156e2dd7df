"""
Caller-side pagination over the coordinator.

The coordinator keeps no cursor of its own: each call reports the window it
covered and the caller feeds ``processed_range.end + 1`` back in until the
folder is exhausted.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from campaign_sync.config.folders import FolderSelector
from campaign_sync.exceptions import DriveHTTPError
from campaign_sync.sync.coordinator import SyncCoordinator
from campaign_sync.sync.summary import SyncSummary
from campaign_sync.utils.logging import get_logger

logger = get_logger("campaign_sync.sync.session")

GATEWAY_STATUSES = {502, 504}


@dataclass(frozen=True)
class SyncResult:
    """One paginated call: its summary, timing, and where to resume."""

    summary: SyncSummary
    started_at: datetime
    completed_at: datetime
    duration_ms: int
    next_cursor: int | None
    batch_size: int


def next_cursor(summary: SyncSummary) -> int | None:
    """Index to resume from, or None once the folder is covered."""
    candidate = summary.processed_range.end + 1
    return candidate if candidate < summary.total_files else None


async def trigger_sync(
    coordinator: SyncCoordinator,
    *,
    cursor: int = 0,
    batch_size: int | None = None,
    folder: FolderSelector | None = None,
    max_runtime_ms: int | None = None,
    now: Callable[[], datetime] = lambda: datetime.now(UTC),
) -> SyncResult:
    started_at = now()
    summary = await coordinator.run(
        start_index=cursor,
        batch_size=batch_size,
        max_runtime_ms=max_runtime_ms,
        folder=folder,
    )
    completed_at = now()

    if summary.total_files == 0:
        logger.warning(
            f"No files found in folder \"{summary.folder_name}\" ({summary.folder_id}). "
            f"Ensure the folder contains CSVs and the API key has access."
        )

    return SyncResult(
        summary=summary,
        started_at=started_at,
        completed_at=completed_at,
        duration_ms=int((completed_at - started_at).total_seconds() * 1000),
        next_cursor=next_cursor(summary),
        batch_size=batch_size if batch_size is not None else summary.processed_files,
    )


async def sync_all(
    coordinator: SyncCoordinator,
    *,
    batch_size: int | None = None,
    folder: FolderSelector | None = None,
    max_runtime_ms: int | None = None,
    start: int = 0,
    on_result: Callable[[SyncResult], None] | None = None,
) -> SyncSummary:
    """
    Call the coordinator repeatedly until the whole folder is covered.

    Returns the merged summary of every call.
    """
    merged = SyncSummary.empty()
    cursor = start

    while True:
        result = await trigger_sync(
            coordinator,
            cursor=cursor,
            batch_size=batch_size,
            folder=folder,
            max_runtime_ms=max_runtime_ms,
        )
        merged = merged.merge(result.summary)
        if on_result is not None:
            on_result(result)

        if result.next_cursor is None:
            return merged
        if result.next_cursor <= cursor:
            logger.warning(f"Sync made no progress at cursor {cursor}; stopping")
            return merged
        cursor = result.next_cursor


def is_timeout_like(exc: BaseException) -> bool:
    if isinstance(exc, TimeoutError):
        return True
    if isinstance(exc, DriveHTTPError) and exc.status in GATEWAY_STATUSES:
        return True
    text = str(exc).lower()
    return "timeout" in text or "timed out" in text or "gateway" in text


def describe_failure(exc: BaseException) -> str:
    """User-facing message for a sync call that could not run."""
    message = str(exc) or type(exc).__name__
    if is_timeout_like(exc):
        return f"{message}. The sync timed out; run it again to continue from the last cursor."
    return message
