"""
Campaign recipient sync coordinator.

One call lists the folder, then walks a window of files in listing order:
match the file name to a campaign, download, parse, persist. Files are
processed strictly one at a time. A wall-clock budget is checked between
files; whatever was done before the budget ran out is returned, and the
caller resumes from ``processed_range.end + 1``.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Mapping

from campaign_sync.config.folders import (
    DEFAULT_FOLDER_KEY,
    DEFAULT_FOLDERS,
    DriveFolder,
    FolderSelector,
    resolve_folder,
)
from campaign_sync.drive.client import DriveClient
from campaign_sync.drive.types import DriveFile
from campaign_sync.exceptions import DriveError
from campaign_sync.recipients.matcher import CampaignMatcher
from campaign_sync.recipients.parser import RecipientParser
from campaign_sync.recipients.types import CampaignRecipient
from campaign_sync.retry import NETWORK_EXCEPTIONS
from campaign_sync.sync.persistence import RecipientPersister
from campaign_sync.sync.summary import FailedDownload, ProcessedRange, SyncSummary
from campaign_sync.utils.logging import get_logger

logger = get_logger("campaign_sync.sync.coordinator")

DEFAULT_MAX_RUNTIME_MS = 50_000
DEFAULT_FILE_DELAY = 0.25

DOWNLOAD_FAILURES = (DriveError, *NETWORK_EXCEPTIONS)


class SyncCoordinator:
    """
    Orchestrates listing, matching, download, parsing and persistence.

    Holds no state between calls; every run() starts from the arguments it
    is given.
    """

    def __init__(
        self,
        drive: DriveClient,
        parser: RecipientParser,
        matcher: CampaignMatcher,
        persister: RecipientPersister,
        *,
        folders: Mapping[str, DriveFolder] | None = None,
        default_folder: str = DEFAULT_FOLDER_KEY,
        max_runtime_ms: int = DEFAULT_MAX_RUNTIME_MS,
        file_delay: float = DEFAULT_FILE_DELAY,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ):
        self.drive = drive
        self.parser = parser
        self.matcher = matcher
        self.persister = persister
        self.folders = dict(folders or DEFAULT_FOLDERS)
        self.default_folder = default_folder
        self.max_runtime_ms = max_runtime_ms
        self.file_delay = file_delay
        self._clock = clock
        self._sleep = sleep or asyncio.sleep

    def resolve_folder(self, folder: FolderSelector | None = None) -> DriveFolder:
        return resolve_folder(folder, self.folders, self.default_folder)

    async def list_folder_files(self, folder: FolderSelector | None = None) -> list[DriveFile]:
        return await self.drive.list_files_in_folder(self.resolve_folder(folder).id)

    async def fetch_recipients(self, folder: FolderSelector | None = None) -> list[CampaignRecipient]:
        """Download and parse every file in the folder without matching or persisting."""
        recipients: list[CampaignRecipient] = []
        for index, file in enumerate(await self.list_folder_files(folder)):
            if index > 0 and self.file_delay > 0:
                await self._sleep(self.file_delay)
            recipients.extend(self.parser.parse(await self.drive.download_file(file)))
        return recipients

    async def run(
        self,
        start_index: int = 0,
        batch_size: int | None = None,
        max_runtime_ms: int | None = None,
        folder: FolderSelector | None = None,
    ) -> SyncSummary:
        """
        Process one window of the folder.

        Args:
            start_index: First file index to process (negative values clamp to 0)
            batch_size: Number of files in the window (default: all remaining)
            max_runtime_ms: Wall-clock budget for this call
            folder: Folder key or DriveFolder (default: the configured default)

        Returns:
            SyncSummary for the files attempted in this call

        Raises:
            ConfigurationError: Unknown folder key
            DriveListingError: Every listing strategy failed
            StoreError: The recipient database could not be read or written
        """
        started = self._clock()
        budget_ms = self.max_runtime_ms if max_runtime_ms is None else max_runtime_ms
        target = self.resolve_folder(folder)

        files = await self.drive.list_files_in_folder(target.id)
        start = max(start_index or 0, 0)
        size = len(files) if batch_size is None else max(batch_size, 0)
        window = files[start : start + size]

        logger.info(
            f"Syncing {target.name}: {len(files)} files, window {start}..{start + len(window) - 1} "
            f"({len(window)} files, budget {budget_ms}ms)"
        )

        processed = 0
        matched = 0
        parsed = 0
        inserted = updated = existing = duplicates = 0
        unmatched: list[str] = []
        failed: list[FailedDownload] = []
        downloads = 0

        for file in window:
            elapsed_ms = (self._clock() - started) * 1000
            # At least one file per call so a resumed caller always makes progress
            if processed > 0 and elapsed_ms >= budget_ms:
                logger.info(
                    f"Runtime budget of {budget_ms}ms reached after {processed} files; "
                    f"resume at index {start + processed}"
                )
                break

            processed += 1

            campaign = await self.matcher.find_campaign_by_file_name(file.name)
            if campaign is None:
                logger.debug(f"No campaign matches {file.name}")
                unmatched.append(file.name)
                continue
            matched += 1

            if downloads > 0 and self.file_delay > 0:
                await self._sleep(self.file_delay)
            downloads += 1

            try:
                content = await self.drive.download_file(file)
            except DOWNLOAD_FAILURES as e:
                reason = str(e) or type(e).__name__
                logger.warning(f"Skipping {file.name}: {reason}")
                failed.append(FailedDownload(file_name=file.name, reason=reason))
                continue

            recipients = self.parser.parse(content)
            parsed += len(recipients)

            result = await self.persister.persist(campaign.id, recipients)
            inserted += result.inserted
            updated += result.updated
            existing += result.existing
            duplicates += result.duplicates

            logger.info(
                f"{file.name} -> {campaign.name}: parsed={len(recipients)} inserted={result.inserted} "
                f"updated={result.updated} existing={result.existing} duplicates={result.duplicates}"
            )

        summary = SyncSummary(
            total_files=len(files),
            processed_files=processed,
            files_matched=matched,
            recipients_parsed=parsed,
            recipients_inserted=inserted,
            recipients_updated=updated,
            recipients_duplicate=duplicates,
            recipients_existing=existing,
            unmatched_files=tuple(unmatched),
            failed_downloads=tuple(failed),
            processed_range=ProcessedRange(start=start, end=start + processed - 1),
            folder_id=target.id,
            folder_name=target.name,
        )

        logger.info(
            f"Sync of {target.name} finished in {(self._clock() - started) * 1000:.0f}ms: "
            f"processed={processed} matched={matched} parsed={parsed} inserted={inserted} "
            f"updated={updated} unmatched={len(unmatched)} failed={len(failed)}"
        )
        return summary
