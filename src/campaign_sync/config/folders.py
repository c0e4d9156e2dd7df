"""
Drive folder table.

Each sync targets one folder from a small, named set. The table is plain
configuration handed to the coordinator, so tests can point it at fake folders.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from campaign_sync.exceptions import ConfigurationError


@dataclass(frozen=True)
class DriveFolder:
    """A remote folder: stable external id plus a display name."""

    id: str
    name: str


DEFAULT_FOLDERS: dict[str, DriveFolder] = {
    "scheduled_email": DriveFolder(id="1jgYwsup7Pd6OaxsQVbrEWbLFRePHKRo9", name="Scheduled Email"),
    "processed_lists": DriveFolder(id="1cFUWnQDpdLWs47ZMSHiZ8SgF3cX6i5A1", name="[00] Processed Lists"),
}

DEFAULT_FOLDER_KEY = "scheduled_email"

FolderSelector = str | DriveFolder


def folders_from_config(data: Mapping[str, Any] | None) -> dict[str, DriveFolder]:
    """
    Build a folder table from the ``folders`` config section.

    Entries are ``key: {id: ..., name: ...}``; ``name`` defaults to the key.
    """
    if not data:
        return dict(DEFAULT_FOLDERS)

    folders: dict[str, DriveFolder] = {}
    for key, entry in data.items():
        if not isinstance(entry, Mapping) or not entry.get("id"):
            raise ConfigurationError(
                f"Folder '{key}' must be a mapping with an 'id'", details={"folder": key}
            )
        folders[key] = DriveFolder(id=str(entry["id"]), name=str(entry.get("name") or key))
    return folders


def resolve_folder(
    folder: FolderSelector | None,
    folders: Mapping[str, DriveFolder],
    default_key: str = DEFAULT_FOLDER_KEY,
) -> DriveFolder:
    """
    Resolve a folder selector against the table.

    ``None`` selects the default key, a string selects by key, and a
    DriveFolder passes through unchanged.
    """
    if folder is None:
        folder = default_key

    if isinstance(folder, DriveFolder):
        return folder

    resolved = folders.get(folder)
    if resolved is None:
        raise ConfigurationError(
            f"Unknown campaign recipient folder: {folder}",
            details={"folder": folder, "available": sorted(folders)},
        )
    return resolved
