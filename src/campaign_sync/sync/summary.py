"""
Sync summary value types.

A summary is built fresh for each coordinator call and never mutated after it
is returned; callers paginating through a folder fold summaries with merge().
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any


@dataclass(frozen=True)
class FailedDownload:
    file_name: str
    reason: str


@dataclass(frozen=True)
class ProcessedRange:
    """Inclusive file index window; ``end == start - 1`` means nothing was attempted."""

    start: int
    end: int

    @property
    def count(self) -> int:
        return max(self.end - self.start + 1, 0)


@dataclass(frozen=True)
class SyncSummary:
    total_files: int = 0
    processed_files: int = 0
    files_matched: int = 0
    recipients_parsed: int = 0
    recipients_inserted: int = 0
    recipients_updated: int = 0
    recipients_duplicate: int = 0
    recipients_existing: int = 0
    unmatched_files: tuple[str, ...] = ()
    failed_downloads: tuple[FailedDownload, ...] = ()
    processed_range: ProcessedRange = field(default_factory=lambda: ProcessedRange(0, -1))
    folder_id: str = ""
    folder_name: str = ""

    @classmethod
    def empty(cls) -> SyncSummary:
        return cls()

    def merge(self, other: SyncSummary) -> SyncSummary:
        """
        Combine two summaries from consecutive calls.

        Counts add, lists concatenate in call order, ``total_files`` takes
        the larger value and the range spans both non-empty windows.
        """
        ranges = [s.processed_range for s in (self, other) if s.processed_files > 0]
        if ranges:
            processed_range = ProcessedRange(min(r.start for r in ranges), max(r.end for r in ranges))
        else:
            processed_range = other.processed_range

        return replace(
            self,
            total_files=max(self.total_files, other.total_files),
            processed_files=self.processed_files + other.processed_files,
            files_matched=self.files_matched + other.files_matched,
            recipients_parsed=self.recipients_parsed + other.recipients_parsed,
            recipients_inserted=self.recipients_inserted + other.recipients_inserted,
            recipients_updated=self.recipients_updated + other.recipients_updated,
            recipients_duplicate=self.recipients_duplicate + other.recipients_duplicate,
            recipients_existing=self.recipients_existing + other.recipients_existing,
            unmatched_files=self.unmatched_files + other.unmatched_files,
            failed_downloads=self.failed_downloads + other.failed_downloads,
            processed_range=processed_range,
            folder_id=other.folder_id or self.folder_id,
            folder_name=other.folder_name or self.folder_name,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["unmatched_files"] = list(self.unmatched_files)
        data["failed_downloads"] = [asdict(f) for f in self.failed_downloads]
        return data
