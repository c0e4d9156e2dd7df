"""
CSV parser for campaign recipient exports.

Input is split into lines first and each line is tokenized on its own with
the standard ``csv`` module. A line whose quotes do not balance is skipped
with a warning, so one broken row never swallows the rows after it.
Commas inside double quotes do not split, and a doubled quote inside a quoted
field is a literal quote. Text following a closing quote is appended to the
field, so ``"a,b"@x.com`` reads as ``a,b@x.com``. Line breaks inside quotes
are not supported.
"""

from __future__ import annotations

import csv
import re
from typing import Protocol

from campaign_sync.recipients.types import CampaignRecipient
from campaign_sync.utils.logging import get_logger

logger = get_logger("campaign_sync.recipients.parser")

# Lower-cased header -> CampaignRecipient field
HEADER_MAP: dict[str, str] = {
    "addressid": "address_id",
    "address_line_1": "address_line1",
    "state_province_region": "state_province_region",
    "city": "city",
    "postal_code": "postal_code",
    "market": "market",
    "sector": "sector",
    "email": "email",
    "core_segment": "core_segment",
    "sub_segment": "sub_segment",
}

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class RecipientParser(Protocol):
    def parse(self, csv_text: str) -> list[CampaignRecipient]: ...


class CsvRecipientParser:
    """Parses CSV text into CampaignRecipient records, dropping rows without an email."""

    def __init__(self, header_map: dict[str, str] | None = None):
        self.header_map = header_map or HEADER_MAP

    def parse(self, csv_text: str) -> list[CampaignRecipient]:
        text = csv_text.lstrip("\ufeff").strip()
        if not text:
            return []

        rows = (row for row in (_tokenize(line) for line in _LINE_BREAK.split(text)) if row and _has_content(row))

        header_row = next(rows, None)
        if header_row is None:
            return []

        columns = [self.resolve_header(header) for header in header_row]
        if "email" not in columns:
            logger.warning(f"CSV header has no email column: {header_row}")

        recipients: list[CampaignRecipient] = []
        dropped = 0
        for row in rows:
            recipient = self._map_row(columns, row)
            if recipient is None:
                dropped += 1
                continue
            recipients.append(recipient)

        if dropped:
            logger.debug(f"Dropped {dropped} rows without an email")
        return recipients

    def resolve_header(self, raw_header: str) -> str | None:
        return self.header_map.get(raw_header.strip().lower())

    def _map_row(self, columns: list[str | None], values: list[str]) -> CampaignRecipient | None:
        record: dict[str, str] = {}
        for index, column in enumerate(columns):
            if column is None:
                continue
            record[column] = values[index].strip() if index < len(values) else ""

        if not record.get("email"):
            return None
        return CampaignRecipient(**record)


def _has_content(row: list[str]) -> bool:
    return any(cell.strip() for cell in row)


def _tokenize(line: str) -> list[str] | None:
    if not line.strip():
        return None
    if line.count('"') % 2:
        logger.warning(f"Skipping CSV line with an unclosed quote: {line[:80]!r}")
        return None
    try:
        return next(csv.reader([line]), None)
    except csv.Error as e:
        logger.warning(f"Skipping unreadable CSV line ({e}): {line[:80]!r}")
        return None
