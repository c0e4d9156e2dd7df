"""
Batched, idempotent recipient upserts.

Records are first deduplicated in memory (by normalized email and by a
composite address key), then written in fixed-size batches: one lookup per
batch, one duplicate-tolerant insert for new emails, and one atomic update
for rows whose fields changed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from campaign_sync.recipients.types import MUTABLE_FIELDS, CampaignRecipient, StoredRecipient
from campaign_sync.store.base import RecipientStore
from campaign_sync.utils.logging import get_logger

logger = get_logger("campaign_sync.sync.persistence")

DEFAULT_BATCH_SIZE = 1000
DEFAULT_BATCH_DELAY = 0.05


@dataclass(frozen=True)
class PersistResult:
    inserted: int = 0
    updated: int = 0
    existing: int = 0
    duplicates: int = 0

    def __add__(self, other: PersistResult) -> PersistResult:
        return PersistResult(
            inserted=self.inserted + other.inserted,
            updated=self.updated + other.updated,
            existing=self.existing + other.existing,
            duplicates=self.duplicates + other.duplicates,
        )


def normalize_email(email: str) -> str:
    return email.strip().lower()


def build_address_key(recipient: CampaignRecipient) -> str:
    """
    Composite address identity: the address id when present, otherwise the
    normalized street/city/region/postal parts. Empty when nothing is known.
    """
    if recipient.address_id.strip():
        return f"id:{recipient.address_id.strip().lower()}"

    parts = [
        part.strip().lower()
        for part in (
            recipient.address_line1,
            recipient.city,
            recipient.state_province_region,
            recipient.postal_code,
        )
    ]
    parts = [part for part in parts if part]
    return f"addr:{'|'.join(parts)}" if parts else ""


def dedupe_recipients(recipients: list[CampaignRecipient]) -> tuple[list[CampaignRecipient], int]:
    """
    Drop records whose email or address key was already seen earlier in the list.

    Returns the kept records (in input order) and the number dropped.
    """
    seen_emails: set[str] = set()
    seen_addresses: set[str] = set()
    kept: list[CampaignRecipient] = []
    duplicates = 0

    for recipient in recipients:
        email_key = normalize_email(recipient.email)
        address_key = build_address_key(recipient)

        if (email_key and email_key in seen_emails) or (address_key and address_key in seen_addresses):
            duplicates += 1
            continue

        if email_key:
            seen_emails.add(email_key)
        if address_key:
            seen_addresses.add(address_key)
        kept.append(recipient)

    return kept, duplicates


def has_changes(existing: CampaignRecipient, incoming: CampaignRecipient) -> bool:
    return any(getattr(existing, name) != getattr(incoming, name) for name in MUTABLE_FIELDS)


class RecipientPersister:
    """Writes parsed recipients for one campaign through a RecipientStore."""

    def __init__(
        self,
        store: RecipientStore,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay: float = DEFAULT_BATCH_DELAY,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.store = store
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self._sleep = sleep or asyncio.sleep

    async def persist(self, campaign_id: str, recipients: list[CampaignRecipient]) -> PersistResult:
        if not recipients:
            return PersistResult()

        unique, duplicates = dedupe_recipients(recipients)
        result = PersistResult(duplicates=duplicates)

        for offset in range(0, len(unique), self.batch_size):
            if offset > 0 and self.batch_delay > 0:
                await self._sleep(self.batch_delay)
            batch = unique[offset : offset + self.batch_size]
            result = result + await self._persist_batch(campaign_id, batch)

        logger.debug(
            f"Campaign {campaign_id}: inserted={result.inserted} updated={result.updated} "
            f"existing={result.existing} duplicates={result.duplicates}"
        )
        return result

    async def _persist_batch(self, campaign_id: str, batch: list[CampaignRecipient]) -> PersistResult:
        existing_rows = await self.store.find_recipients(campaign_id, [r.email for r in batch])
        existing_by_email: dict[str, StoredRecipient] = {
            normalize_email(row.recipient.email): row for row in existing_rows
        }

        creates: list[CampaignRecipient] = []
        updates: list[tuple[str, CampaignRecipient]] = []
        existing = 0

        for recipient in batch:
            stored = existing_by_email.get(normalize_email(recipient.email))
            if stored is None:
                creates.append(recipient)
                continue
            existing += 1
            if has_changes(stored.recipient, recipient):
                updates.append((stored.id, recipient))

        inserted = await self.store.create_recipients(campaign_id, creates) if creates else 0
        updated = await self.store.update_recipients(campaign_id, updates) if updates else 0

        return PersistResult(inserted=inserted, updated=updated, existing=existing)
