"""
Tests for caller-side pagination and failure descriptions.
"""

from datetime import UTC, datetime, timedelta

import pytest

from campaign_sync.exceptions import DriveHTTPError, DriveListingError, StoreError
from campaign_sync.sync import ProcessedRange, SyncSummary, describe_failure, next_cursor, sync_all, trigger_sync


class TestNextCursor:
    """Tests for next_cursor."""

    def test_more_files_remain(self):
        assert next_cursor(SyncSummary(total_files=10, processed_files=3, processed_range=ProcessedRange(0, 2))) == 3

    def test_folder_covered(self):
        assert next_cursor(SyncSummary(total_files=10, processed_files=1, processed_range=ProcessedRange(9, 9))) is None

    def test_empty_folder(self):
        assert next_cursor(SyncSummary()) is None


class TestTriggerSync:
    """Tests for trigger_sync."""

    @pytest.mark.asyncio
    async def test_result_envelope(self, drive, make_coordinator):
        for i in range(5):
            drive.add_file(f"Other {i}.csv", "Email\n")
        times = iter([datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 1, 1, tzinfo=UTC) + timedelta(milliseconds=250)])

        result = await trigger_sync(make_coordinator(), cursor=0, batch_size=2, now=lambda: next(times))

        assert result.next_cursor == 2
        assert result.duration_ms == 250
        assert result.batch_size == 2
        assert result.summary.processed_range == ProcessedRange(0, 1)

    @pytest.mark.asyncio
    async def test_empty_folder_has_no_cursor(self, make_coordinator):
        result = await trigger_sync(make_coordinator())
        assert result.next_cursor is None
        assert result.summary.total_files == 0


class TestSyncAll:
    """Tests for sync_all."""

    @pytest.mark.asyncio
    async def test_pages_through_folder(self, drive, make_coordinator):
        for i in range(10):
            drive.add_file(f"Other {i}.csv", "Email\n")
        drive.add_file("Spring_Promo.csv", "Email\na@example.com\n")
        results = []

        merged = await sync_all(make_coordinator(), batch_size=3, on_result=results.append)

        assert [r.summary.processed_range for r in results] == [
            ProcessedRange(0, 2),
            ProcessedRange(3, 5),
            ProcessedRange(6, 8),
            ProcessedRange(9, 10),
        ]
        assert len(drive.listed) == 4
        assert merged.processed_files == 11
        assert merged.processed_range == ProcessedRange(0, 10)
        assert merged.recipients_inserted == 1
        assert len(merged.unmatched_files) == 10

    @pytest.mark.asyncio
    async def test_resumes_after_budget_stops(self, drive, make_coordinator):
        drive.add_file("Spring_Promo.csv", "Email\na@example.com\n")
        drive.add_file("Fall Launch.csv", "Email\nb@example.com\n")
        drive.add_file("Spring Promo.csv", "Email\nc@example.com\n")

        merged = await sync_all(make_coordinator(max_runtime_ms=0))

        assert len(drive.listed) == 3
        assert merged.processed_files == 3
        assert merged.recipients_inserted == 3

    @pytest.mark.asyncio
    async def test_start_cursor(self, drive, make_coordinator):
        for i in range(4):
            drive.add_file(f"Other {i}.csv", "Email\n")

        merged = await sync_all(make_coordinator(), start=2)

        assert merged.processed_range == ProcessedRange(2, 3)

    @pytest.mark.asyncio
    async def test_empty_folder(self, make_coordinator):
        merged = await sync_all(make_coordinator(), batch_size=5)
        assert merged.processed_files == 0


class TestDescribeFailure:
    """Tests for describe_failure."""

    def test_timeout(self):
        assert "run it again" in describe_failure(TimeoutError())

    def test_gateway_errors(self):
        assert "run it again" in describe_failure(DriveHTTPError(504, "https://example.com", "Gateway Timeout"))
        assert "run it again" in describe_failure(DriveHTTPError(502, "https://example.com", "Bad Gateway"))

    def test_timeout_message_text(self):
        assert "run it again" in describe_failure(StoreError("statement timed out"))

    def test_other_errors_pass_through(self):
        error = DriveListingError("folder1", ["standard: 403 Forbidden"])
        assert describe_failure(error) == "Failed to list files in folder folder1: standard: 403 Forbidden"
