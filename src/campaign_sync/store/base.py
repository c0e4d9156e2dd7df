"""
Persistence interfaces consumed by the sync pipeline.

The dashboard owns the schema; this package only needs campaign lookup by
name and recipient find / create / update keyed by (campaign, email).
"""

from __future__ import annotations

from typing import Protocol

from campaign_sync.recipients.matcher import CampaignStore
from campaign_sync.recipients.types import CampaignRecipient, StoredRecipient


class RecipientStore(Protocol):
    async def find_recipients(self, campaign_id: str, emails: list[str]) -> list[StoredRecipient]:
        """Rows for the campaign whose email matches any of ``emails``, case-insensitively."""
        ...

    async def create_recipients(self, campaign_id: str, recipients: list[CampaignRecipient]) -> int:
        """Insert rows, skipping storage-level duplicates. Returns the number inserted."""
        ...

    async def update_recipients(self, campaign_id: str, updates: list[tuple[str, CampaignRecipient]]) -> int:
        """Apply all ``(row_id, recipient)`` updates atomically. Returns the number updated."""
        ...


__all__ = ["CampaignStore", "RecipientStore"]
