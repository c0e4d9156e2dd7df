"""
File name to campaign matching.

Drive file names are campaign names with an extension and, often, underscores
in place of spaces. Candidates cover both spellings and are resolved with one
case-insensitive lookup.
"""

from __future__ import annotations

import re
from typing import Protocol

from campaign_sync.recipients.types import Campaign


class CampaignStore(Protocol):
    async def find_campaign_by_names(self, candidates: list[str]) -> Campaign | None: ...


def strip_extension(file_name: str) -> str:
    return re.sub(r"\.[^.]+$", "", file_name).strip()


def campaign_name_candidates(file_name: str) -> list[str]:
    """
    Name variants for a file: as-is, underscores as spaces, spaces as underscores.

    Order is preserved, duplicates and blank values removed.
    """
    base = strip_extension(file_name)
    variants = [base, base.replace("_", " "), re.sub(r"\s+", "_", base)]

    candidates: list[str] = []
    for variant in variants:
        if variant.strip() and variant not in candidates:
            candidates.append(variant)
    return candidates


class CampaignMatcher:
    """Looks up the campaign a Drive file belongs to."""

    def __init__(self, store: CampaignStore):
        self.store = store

    async def find_campaign_by_file_name(self, file_name: str) -> Campaign | None:
        candidates = campaign_name_candidates(file_name)
        if not candidates:
            return None
        return await self.store.find_campaign_by_names(candidates)
