"""
In-memory stand-ins for the Drive client and the recipient database.

Used by the test suite and by ``campaign-sync run --dry-run``, which matches
campaigns against the real database but writes recipients to memory only.

Usage:
    from campaign_sync.testing import FakeDriveClient, InMemoryCampaignStore, InMemoryRecipientStore

    drive = FakeDriveClient({"Spring_Promo.csv": "email\\na@example.com\\n"})
    campaigns = InMemoryCampaignStore(["Spring Promo"])
    recipients = InMemoryRecipientStore()
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from dataclasses import replace

from campaign_sync.drive.types import DriveFile
from campaign_sync.exceptions import DriveDownloadError, StoreError
from campaign_sync.recipients.types import Campaign, CampaignRecipient, StoredRecipient


class InMemoryCampaignStore:
    """Campaigns by name, matched case-insensitively in candidate order."""

    def __init__(self, campaigns: Iterable[str | Campaign] = ()):
        self.campaigns: list[Campaign] = []
        self.lookups: list[list[str]] = []
        for campaign in campaigns:
            self.add(campaign)

    def add(self, campaign: str | Campaign) -> Campaign:
        if isinstance(campaign, str):
            campaign = Campaign(id=uuid.uuid4().hex, name=campaign)
        self.campaigns.append(campaign)
        return campaign

    async def find_campaign_by_names(self, candidates: list[str]) -> Campaign | None:
        self.lookups.append(list(candidates))
        for candidate in candidates:
            for campaign in self.campaigns:
                if campaign.name.lower() == candidate.lower():
                    return campaign
        return None


class InMemoryRecipientStore:
    """
    Recipient rows keyed by (campaign id, lower-cased email).

    Inserts skip existing keys like ``ON CONFLICT DO NOTHING``; an update
    batch is applied only if every row id exists. ``fail_updates`` makes the
    next update batch raise StoreError without applying anything.
    """

    def __init__(self) -> None:
        self.rows: dict[str, tuple[str, CampaignRecipient]] = {}
        self.fail_updates = False
        self.calls: list[str] = []

    def recipients_for(self, campaign_id: str) -> list[CampaignRecipient]:
        return [recipient for cid, recipient in self.rows.values() if cid == campaign_id]

    def _key_index(self) -> dict[tuple[str, str], str]:
        return {(cid, r.email.lower()): row_id for row_id, (cid, r) in self.rows.items()}

    async def find_recipients(self, campaign_id: str, emails: list[str]) -> list[StoredRecipient]:
        self.calls.append("find")
        wanted = {email.lower() for email in emails}
        return [
            StoredRecipient(id=row_id, recipient=recipient)
            for row_id, (cid, recipient) in self.rows.items()
            if cid == campaign_id and recipient.email.lower() in wanted
        ]

    async def create_recipients(self, campaign_id: str, recipients: list[CampaignRecipient]) -> int:
        self.calls.append("create")
        index = self._key_index()
        inserted = 0
        for recipient in recipients:
            key = (campaign_id, recipient.email.lower())
            if key in index:
                continue
            row_id = uuid.uuid4().hex
            self.rows[row_id] = (campaign_id, recipient)
            index[key] = row_id
            inserted += 1
        return inserted

    async def update_recipients(self, campaign_id: str, updates: list[tuple[str, CampaignRecipient]]) -> int:
        self.calls.append("update")
        if self.fail_updates:
            raise StoreError(f"Recipient update batch failed ({len(updates)} rows): simulated failure")
        missing = [row_id for row_id, _ in updates if row_id not in self.rows]
        if missing:
            raise StoreError(f"Recipient update batch failed: unknown rows {missing}")
        for row_id, recipient in updates:
            cid, stored = self.rows[row_id]
            self.rows[row_id] = (cid, replace(recipient, email=stored.email))
        return len(updates)


class FakeDriveClient:
    """
    Drive client serving fixed file contents in insertion order.

    Contents may be a string (CSV text) or an exception instance, which is
    raised when that file is downloaded.
    """

    def __init__(self, contents: Mapping[str, str | BaseException] | None = None, *, mime_type: str = "text/csv"):
        self.files: list[DriveFile] = []
        self.contents: dict[str, str | BaseException] = {}
        self.listed: list[str] = []
        self.downloaded: list[str] = []
        for name, content in (contents or {}).items():
            self.add_file(name, content, mime_type=mime_type)

    def add_file(self, name: str, content: str | BaseException, *, mime_type: str = "text/csv") -> DriveFile:
        file = DriveFile(id=f"file-{len(self.files)}", name=name, mime_type=mime_type)
        self.files.append(file)
        self.contents[file.id] = content
        return file

    async def list_files_in_folder(self, folder_id: str) -> list[DriveFile]:
        self.listed.append(folder_id)
        return list(self.files)

    async def download_file(self, file: DriveFile) -> str:
        self.downloaded.append(file.name)
        content = self.contents.get(file.id)
        if content is None:
            raise DriveDownloadError(file.name, ["fake: no content"])
        if isinstance(content, BaseException):
            raise content
        return content
