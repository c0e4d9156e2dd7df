"""
Recipient and campaign record types.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields


@dataclass(frozen=True)
class CampaignRecipient:
    """One parsed CSV row. Only ``email`` is required to be non-empty."""

    address_id: str = ""
    address_line1: str = ""
    state_province_region: str = ""
    city: str = ""
    postal_code: str = ""
    market: str = ""
    sector: str = ""
    email: str = ""
    core_segment: str = ""
    sub_segment: str = ""

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


RECIPIENT_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(CampaignRecipient))


@dataclass(frozen=True)
class Campaign:
    """An email campaign owned by the dashboard; read-only here."""

    id: str
    name: str


@dataclass(frozen=True)
class StoredRecipient:
    """A persisted recipient row as seen by the upsert diff."""

    id: str
    recipient: CampaignRecipient

# Everything but the row key; an upsert only rewrites these
MUTABLE_FIELDS: tuple[str, ...] = tuple(name for name in RECIPIENT_FIELDS if name != "email")
