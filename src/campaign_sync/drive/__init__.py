"""
Remote file store access: Google Drive listing and download.
"""

from campaign_sync.drive.client import DriveClient, GoogleDriveClient
from campaign_sync.drive.types import (
    CSV_EXPORT_MIME_TYPE,
    GOOGLE_DRIVE_SHORTCUT_MIME_TYPE,
    GOOGLE_SHEETS_MIME_TYPE,
    DriveFile,
    RequestSpec,
    ShortcutTarget,
)

__all__ = [
    "DriveClient",
    "GoogleDriveClient",
    "DriveFile",
    "ShortcutTarget",
    "RequestSpec",
    "GOOGLE_SHEETS_MIME_TYPE",
    "GOOGLE_DRIVE_SHORTCUT_MIME_TYPE",
    "CSV_EXPORT_MIME_TYPE",
]
