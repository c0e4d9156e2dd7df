"""
Listing and download strategy chains.

Folder permissions vary between shared drives and personal drives, and some
files are only reachable through public export links. Both operations are
therefore expressed as ordered lists of strategies, tried in sequence until
one succeeds. Each strategy is a pure function from its inputs to a
RequestSpec; the client owns all I/O.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from campaign_sync.drive.types import CSV_EXPORT_MIME_TYPE, DriveFile, RequestSpec

DRIVE_FILES_ENDPOINT = "https://www.googleapis.com/drive/v3/files"
PUBLIC_SHEET_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{file_id}/export"
PUBLIC_DIRECT_URL = "https://drive.google.com/uc"

LIST_FIELDS = "files(id,name,mimeType,shortcutDetails(targetId,targetMimeType)),nextPageToken"
METADATA_FIELDS = "id,name,mimeType,shortcutDetails(targetId,targetMimeType)"
LIST_PAGE_SIZE = "1000"


@dataclass(frozen=True)
class ListingStrategy:
    """Extra query params for one way of listing a folder."""

    label: str
    params: dict[str, str] = field(default_factory=dict)


_ALL_DRIVES = {"includeItemsFromAllDrives": "true", "supportsAllDrives": "true"}

# Broadest shared-drive support first, plain listing last
LISTING_STRATEGIES: list[ListingStrategy] = [
    ListingStrategy("supportsAllDrives", dict(_ALL_DRIVES)),
    ListingStrategy("supportsAllDrives+drive", {**_ALL_DRIVES, "corpora": "drive"}),
    ListingStrategy("supportsAllDrives+allDrives", {**_ALL_DRIVES, "corpora": "allDrives"}),
    ListingStrategy("standard"),
]


def build_listing_request(
    strategy: ListingStrategy,
    folder_id: str,
    api_key: str,
    page_token: str | None = None,
    endpoint: str = DRIVE_FILES_ENDPOINT,
) -> RequestSpec:
    params = {
        "q": f"'{folder_id}' in parents and trashed = false",
        "fields": LIST_FIELDS,
        "pageSize": LIST_PAGE_SIZE,
        "key": api_key,
        **strategy.params,
    }
    if page_token:
        params["pageToken"] = page_token
    return RequestSpec(label=strategy.label, url=endpoint, params=params)


def build_metadata_request(file_id: str, api_key: str, endpoint: str = DRIVE_FILES_ENDPOINT) -> RequestSpec:
    return RequestSpec(
        label="metadata",
        url=f"{endpoint}/{file_id}",
        params={"supportsAllDrives": "true", "fields": METADATA_FIELDS, "key": api_key},
    )


DownloadStrategy = Callable[[DriveFile, str, str], RequestSpec]


def drive_export(file: DriveFile, api_key: str, endpoint: str = DRIVE_FILES_ENDPOINT) -> RequestSpec:
    """Export a native spreadsheet as CSV through the Drive API."""
    return RequestSpec(
        label="drive-export",
        url=f"{endpoint}/{file.id}/export",
        params={"supportsAllDrives": "true", "key": api_key, "mimeType": CSV_EXPORT_MIME_TYPE},
    )


def public_sheet_export(file: DriveFile, api_key: str, endpoint: str = DRIVE_FILES_ENDPOINT) -> RequestSpec:
    return RequestSpec(
        label="public-sheet-export",
        url=PUBLIC_SHEET_EXPORT_URL.format(file_id=file.id),
        params={"format": "csv"},
    )


def drive_download(file: DriveFile, api_key: str, endpoint: str = DRIVE_FILES_ENDPOINT) -> RequestSpec:
    """Download raw file content through the Drive API."""
    return RequestSpec(
        label="drive-download",
        url=f"{endpoint}/{file.id}",
        params={"supportsAllDrives": "true", "key": api_key, "alt": "media", "acknowledgeAbuse": "true"},
    )


def public_direct(file: DriveFile, api_key: str, endpoint: str = DRIVE_FILES_ENDPOINT) -> RequestSpec:
    return RequestSpec(
        label="public-direct",
        url=PUBLIC_DIRECT_URL,
        params={"export": "download", "id": file.id},
    )


SPREADSHEET_STRATEGIES: list[DownloadStrategy] = [drive_export, public_sheet_export, public_direct]
BINARY_STRATEGIES: list[DownloadStrategy] = [drive_download, public_direct]


def download_requests(file: DriveFile, api_key: str, endpoint: str = DRIVE_FILES_ENDPOINT) -> list[RequestSpec]:
    """Ordered download attempts for an already-resolved (non-shortcut) file."""
    strategies = SPREADSHEET_STRATEGIES if file.is_spreadsheet else BINARY_STRATEGIES
    return [strategy(file, api_key, endpoint) for strategy in strategies]
