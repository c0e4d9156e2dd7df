"""
Shared fixtures for campaign_sync tests.
"""

import pytest

from campaign_sync.config import DriveFolder
from campaign_sync.recipients import CampaignMatcher, CsvRecipientParser
from campaign_sync.retry import RetryPolicy
from campaign_sync.sync import RecipientPersister, SyncCoordinator
from campaign_sync.testing import FakeDriveClient, InMemoryCampaignStore, InMemoryRecipientStore

TEST_FOLDERS = {
    "scheduled_email": DriveFolder(id="folder-scheduled", name="Scheduled Email"),
    "processed_lists": DriveFolder(id="folder-processed", name="[00] Processed Lists"),
}

HEADER = "AddressID,Address_Line_1,City,State_Province_Region,Postal_Code,Market,Sector,Email,Core_Segment,Sub_Segment"


def csv_rows(*rows: str) -> str:
    return "\n".join([HEADER, *rows]) + "\n"


class FakeClock:
    """Monotonic clock advanced only by the coordinator's sleeps."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fast_policy():
    return RetryPolicy(max_attempts=0, initial_delay=0.001, max_delay=0.001, jitter=False, timeout=5.0)


@pytest.fixture
def campaigns():
    return InMemoryCampaignStore(["Spring Promo", "Fall Launch"])


@pytest.fixture
def recipient_store():
    return InMemoryRecipientStore()


@pytest.fixture
def drive():
    return FakeDriveClient()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_coordinator(drive, campaigns, recipient_store, clock):
    def factory(**kwargs):
        persister = RecipientPersister(recipient_store, batch_size=kwargs.pop("persist_batch_size", 1000), batch_delay=0)
        return SyncCoordinator(
            drive,
            CsvRecipientParser(),
            CampaignMatcher(campaigns),
            persister,
            folders=TEST_FOLDERS,
            clock=clock,
            sleep=clock.sleep,
            file_delay=kwargs.pop("file_delay", 0),
            **kwargs,
        )

    return factory
