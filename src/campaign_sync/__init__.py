"""
campaign_sync - Sync campaign recipient lists from Google Drive into the campaign database.

Files in a Drive folder are matched to email campaigns by name, downloaded
as CSV, parsed into recipients and upserted per campaign. Each call covers a
window of the folder under a runtime budget; callers resume from the next
cursor until the folder is covered.
"""

__version__ = "0.1.0"

from campaign_sync.config import Config, DriveFolder, load_config
from campaign_sync.drive import DriveFile, GoogleDriveClient
from campaign_sync.exceptions import (
    CampaignSyncError,
    ConfigurationError,
    DriveDownloadError,
    DriveError,
    DriveHTTPError,
    DriveListingError,
    ShortcutResolutionError,
    StoreError,
)
from campaign_sync.recipients import Campaign, CampaignMatcher, CampaignRecipient, CsvRecipientParser
from campaign_sync.sync import (
    RecipientPersister,
    SyncCoordinator,
    SyncResult,
    SyncSummary,
    sync_all,
    trigger_sync,
)

__all__ = [
    "__version__",
    "Config",
    "DriveFolder",
    "load_config",
    "DriveFile",
    "GoogleDriveClient",
    "Campaign",
    "CampaignRecipient",
    "CampaignMatcher",
    "CsvRecipientParser",
    "RecipientPersister",
    "SyncCoordinator",
    "SyncSummary",
    "SyncResult",
    "trigger_sync",
    "sync_all",
    "CampaignSyncError",
    "ConfigurationError",
    "DriveError",
    "DriveListingError",
    "DriveDownloadError",
    "DriveHTTPError",
    "ShortcutResolutionError",
    "StoreError",
]
