"""
ibis-backed campaign and recipient stores.

Statements are plain SQL text with escaped literals so the same code runs on
DuckDB and Postgres. Inserts rely on the (email_campaign_id, email) unique
constraint with ON CONFLICT DO NOTHING; each batch of updates runs inside one
explicit transaction.
"""

from __future__ import annotations

import asyncio
import uuid

import ibis

from campaign_sync.exceptions import StoreError
from campaign_sync.recipients.types import MUTABLE_FIELDS, Campaign, CampaignRecipient, StoredRecipient
from campaign_sync.store.sql import execute, fetch_all, sql_list, sql_value
from campaign_sync.utils.logging import get_logger

logger = get_logger("campaign_sync.store")

CAMPAIGNS_TABLE = "email_campaigns"
RECIPIENTS_TABLE = "campaign_recipients"

# CampaignRecipient field -> column
COLUMN_MAP: dict[str, str] = {
    "email": "email",
    "address_id": "address_id",
    "address_line1": "address_1",
    "city": "city",
    "state_province_region": "state",
    "postal_code": "zip",
    "sector": "sector",
    "market": "market",
    "core_segment": "core_segment",
    "sub_segment": "sub_segment",
}


def initialize_schema(backend: ibis.BaseBackend) -> None:
    """Create the campaign and recipient tables if they don't exist."""
    execute(
        backend,
        f"""
        CREATE TABLE IF NOT EXISTS {CAMPAIGNS_TABLE} (
            id VARCHAR PRIMARY KEY,
            campaign_name VARCHAR NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """,
    )
    execute(
        backend,
        f"""
        CREATE TABLE IF NOT EXISTS {RECIPIENTS_TABLE} (
            id VARCHAR PRIMARY KEY,
            email_campaign_id VARCHAR NOT NULL,
            email VARCHAR NOT NULL,
            address_id VARCHAR,
            address_1 VARCHAR,
            city VARCHAR,
            state VARCHAR,
            zip VARCHAR,
            sector VARCHAR,
            market VARCHAR,
            core_segment VARCHAR,
            sub_segment VARCHAR,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE (email_campaign_id, email)
        )
        """,
    )
    logger.debug("Recipient schema initialized")


def add_campaign(backend: ibis.BaseBackend, name: str, campaign_id: str | None = None) -> Campaign:
    """Insert a campaign row (used for seeding local databases)."""
    campaign = Campaign(id=campaign_id or uuid.uuid4().hex, name=name)
    execute(
        backend,
        f"INSERT INTO {CAMPAIGNS_TABLE} (id, campaign_name) VALUES ({sql_value(campaign.id)}, {sql_value(name)})",
    )
    return campaign


class SqlCampaignStore:
    """Case-insensitive campaign lookup by name."""

    def __init__(self, backend: ibis.BaseBackend):
        self.backend = backend

    async def find_campaign_by_names(self, candidates: list[str]) -> Campaign | None:
        if not candidates:
            return None
        return await asyncio.to_thread(self._find_by_names, candidates)

    def _find_by_names(self, candidates: list[str]) -> Campaign | None:
        lowered = [c.lower() for c in candidates]
        query = f"""
            SELECT id, campaign_name
            FROM {CAMPAIGNS_TABLE}
            WHERE lower(campaign_name) IN ({sql_list(lowered)})
            LIMIT 1
        """
        try:
            rows = fetch_all(self.backend, query)
        except Exception as e:
            raise StoreError(f"Campaign lookup failed: {e}", details={"candidates": candidates}) from e
        if not rows:
            return None
        campaign_id, name = rows[0]
        return Campaign(id=str(campaign_id), name=name)


class SqlRecipientStore:
    """Recipient rows keyed by (email_campaign_id, email)."""

    def __init__(self, backend: ibis.BaseBackend):
        self.backend = backend

    async def find_recipients(self, campaign_id: str, emails: list[str]) -> list[StoredRecipient]:
        if not emails:
            return []
        return await asyncio.to_thread(self._find, campaign_id, emails)

    async def create_recipients(self, campaign_id: str, recipients: list[CampaignRecipient]) -> int:
        if not recipients:
            return 0
        return await asyncio.to_thread(self._create, campaign_id, recipients)

    async def update_recipients(self, campaign_id: str, updates: list[tuple[str, CampaignRecipient]]) -> int:
        if not updates:
            return 0
        return await asyncio.to_thread(self._update, updates)

    def _find(self, campaign_id: str, emails: list[str]) -> list[StoredRecipient]:
        fields = list(COLUMN_MAP)
        columns = ", ".join(COLUMN_MAP[f] for f in fields)
        lowered = sorted({e.lower() for e in emails})
        query = f"""
            SELECT id, {columns}
            FROM {RECIPIENTS_TABLE}
            WHERE email_campaign_id = {sql_value(campaign_id)}
              AND lower(email) IN ({sql_list(lowered)})
        """
        try:
            rows = fetch_all(self.backend, query)
        except Exception as e:
            raise StoreError(f"Recipient lookup failed for campaign {campaign_id}: {e}") from e

        stored = []
        for row in rows:
            values = {field: (value or "") for field, value in zip(fields, row[1:])}
            stored.append(StoredRecipient(id=str(row[0]), recipient=CampaignRecipient(**values)))
        return stored

    def _create(self, campaign_id: str, recipients: list[CampaignRecipient]) -> int:
        fields = list(COLUMN_MAP)
        columns = ", ".join(["id", "email_campaign_id"] + [COLUMN_MAP[f] for f in fields])
        values = ",\n".join(
            "({})".format(
                sql_list([uuid.uuid4().hex, campaign_id] + [getattr(recipient, f) for f in fields])
            )
            for recipient in recipients
        )
        query = f"""
            INSERT INTO {RECIPIENTS_TABLE} ({columns})
            VALUES {values}
            ON CONFLICT DO NOTHING
            RETURNING id
        """
        try:
            inserted = len(fetch_all(self.backend, query))
        except Exception as e:
            raise StoreError(f"Recipient insert failed for campaign {campaign_id}: {e}") from e

        skipped = len(recipients) - inserted
        if skipped:
            logger.debug(f"Skipped {skipped} duplicate recipients for campaign {campaign_id}")
        return inserted

    def _update(self, updates: list[tuple[str, CampaignRecipient]]) -> int:
        statements = ["BEGIN TRANSACTION"]
        for row_id, recipient in updates:
            assignments = ", ".join(
                f"{COLUMN_MAP[field]} = {sql_value(getattr(recipient, field))}" for field in MUTABLE_FIELDS
            )
            statements.append(
                f"UPDATE {RECIPIENTS_TABLE} SET {assignments}, updated_at = CURRENT_TIMESTAMP "
                f"WHERE id = {sql_value(row_id)}"
            )
        statements.append("COMMIT")

        try:
            execute(self.backend, ";\n".join(statements))
        except Exception as e:
            self._rollback()
            raise StoreError(f"Recipient update batch failed ({len(updates)} rows): {e}") from e
        return len(updates)

    def _rollback(self) -> None:
        try:
            execute(self.backend, "ROLLBACK")
        except Exception as e:
            # No open transaction left to roll back
            logger.debug(f"Rollback after failed update batch: {e}")
