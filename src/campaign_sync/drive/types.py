"""
Type definitions for remote Drive files and request descriptors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

GOOGLE_SHEETS_MIME_TYPE = "application/vnd.google-apps.spreadsheet"
GOOGLE_DRIVE_SHORTCUT_MIME_TYPE = "application/vnd.google-apps.shortcut"
CSV_EXPORT_MIME_TYPE = "text/csv"


@dataclass(frozen=True)
class ShortcutTarget:
    id: str
    mime_type: str | None = None


@dataclass(frozen=True)
class DriveFile:
    """A file entry from a folder listing. Lives for one sync pass only."""

    id: str
    name: str
    mime_type: str
    shortcut_target: ShortcutTarget | None = None

    @property
    def is_shortcut(self) -> bool:
        return self.mime_type == GOOGLE_DRIVE_SHORTCUT_MIME_TYPE

    @property
    def is_spreadsheet(self) -> bool:
        return self.mime_type == GOOGLE_SHEETS_MIME_TYPE

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> DriveFile:
        """Build from a Drive v3 ``files`` resource. Raises ValueError for entries without an id."""
        if not isinstance(payload, dict) or not payload.get("id"):
            raise ValueError(f"Drive file entry has no id: {payload!r:.200}")
        details = payload.get("shortcutDetails") or {}
        target = None
        if details.get("targetId"):
            target = ShortcutTarget(id=details["targetId"], mime_type=details.get("targetMimeType"))
        return cls(
            id=payload["id"],
            name=payload.get("name", ""),
            mime_type=payload.get("mimeType", ""),
            shortcut_target=target,
        )


@dataclass(frozen=True)
class RequestSpec:
    """One GET request: a label for error reporting, the URL and its query params."""

    label: str
    url: str
    params: dict[str, str] = field(default_factory=dict)
