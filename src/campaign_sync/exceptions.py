"""
campaign_sync exception hierarchy.

All domain-specific exceptions inherit from CampaignSyncError, so callers can
catch any sync failure with a single base class while still handling the
systemic cases (configuration, listing) separately from per-file ones.

Hierarchy::

    CampaignSyncError
    ├── ConfigurationError          - missing credential, unknown folder, bad config file
    ├── DriveError                  - remote file-store failures
    │   ├── DriveListingError       - every listing strategy failed
    │   ├── DriveDownloadError      - every download strategy failed for one file
    │   ├── ShortcutResolutionError - shortcut without target details
    │   └── DriveHTTPError          - a single non-2xx response
    ├── RetryError                  - retry loop ended without a result
    └── StoreError                  - persistence backend read/write
"""

from __future__ import annotations


class CampaignSyncError(Exception):
    """Base exception for all campaign_sync errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- Configuration -----------------------------------------------------------


class ConfigurationError(CampaignSyncError):
    """Raised when configuration loading, parsing, or validation fails."""


# --- Drive -------------------------------------------------------------------


class DriveError(CampaignSyncError):
    """Raised when the remote file store cannot be read."""


class DriveListingError(DriveError):
    """Raised when every folder listing strategy has failed."""

    def __init__(self, folder_id: str, failures: list[str]) -> None:
        joined = "; ".join(failures) if failures else "no strategies attempted"
        super().__init__(
            f"Failed to list files in folder {folder_id}: {joined}",
            details={"folder_id": folder_id, "failures": failures},
        )
        self.folder_id = folder_id
        self.failures = failures


class DriveDownloadError(DriveError):
    """Raised when every download strategy has failed for a file."""

    def __init__(self, file_name: str, failures: list[str]) -> None:
        super().__init__(
            f"Failed to download file {file_name}: {'; '.join(failures)}",
            details={"file_name": file_name, "failures": failures},
        )
        self.file_name = file_name
        self.failures = failures


class ShortcutResolutionError(DriveError):
    """Raised when a shortcut cannot be resolved to its target."""


class DriveHTTPError(DriveError):
    """Raised for a single non-2xx response from the remote store."""

    def __init__(self, status: int, url: str, reason: str = "", body: str = "") -> None:
        text = f"{status} {reason}".strip()
        if body:
            text = f"{text} - {body[:200]}"
        super().__init__(text, details={"status": status, "url": url})
        self.status = status
        self.url = url
        self.reason = reason
        self.body = body


# --- Retry -------------------------------------------------------------------


class RetryError(CampaignSyncError):
    """Raised when a retry loop ends without a result or an exception to re-raise."""


# --- Store -------------------------------------------------------------------


class StoreError(CampaignSyncError):
    """Raised when the recipient database cannot be read or written."""
