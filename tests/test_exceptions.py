"""
Tests for the exception hierarchy.
"""

from campaign_sync.exceptions import (
    CampaignSyncError,
    ConfigurationError,
    DriveDownloadError,
    DriveError,
    DriveHTTPError,
    DriveListingError,
    RetryError,
    ShortcutResolutionError,
    StoreError,
)


class TestHierarchy:
    """Tests for exception inheritance."""

    def test_all_derive_from_base(self):
        for error_type in (ConfigurationError, DriveError, RetryError, StoreError):
            assert issubclass(error_type, CampaignSyncError)

    def test_drive_errors(self):
        for error_type in (DriveListingError, DriveDownloadError, ShortcutResolutionError, DriveHTTPError):
            assert issubclass(error_type, DriveError)


class TestMessages:
    """Tests for exception messages and details."""

    def test_base_details(self):
        error = ConfigurationError("bad", details={"key": "x"})
        assert str(error) == "bad"
        assert error.message == "bad"
        assert error.details == {"key": "x"}

    def test_details_default_to_empty(self):
        assert StoreError("boom").details == {}

    def test_listing_error(self):
        error = DriveListingError("folder1", ["supportsAllDrives: 403 Forbidden", "standard: 404 Not Found"])
        assert str(error) == (
            "Failed to list files in folder folder1: supportsAllDrives: 403 Forbidden; standard: 404 Not Found"
        )
        assert error.details["folder_id"] == "folder1"

    def test_download_error(self):
        error = DriveDownloadError("List.csv", ["drive-download: 500"])
        assert str(error) == "Failed to download file List.csv: drive-download: 500"
        assert error.file_name == "List.csv"

    def test_http_error_truncates_body(self):
        error = DriveHTTPError(500, "https://example.com", "Internal Server Error", "x" * 500)
        assert str(error) == "500 Internal Server Error - " + "x" * 200
        assert error.status == 500
        assert error.url == "https://example.com"

    def test_http_error_without_body(self):
        assert str(DriveHTTPError(404, "https://example.com", "Not Found")) == "404 Not Found"
