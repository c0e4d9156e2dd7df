"""
Shared CLI setup: load config, configure logging, and wire the pipeline.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

import ibis

from campaign_sync.config import Config, load_config
from campaign_sync.drive import GoogleDriveClient
from campaign_sync.recipients import CampaignMatcher, CsvRecipientParser
from campaign_sync.retry import RetryPolicy
from campaign_sync.store import SqlCampaignStore, SqlRecipientStore, connect_backend
from campaign_sync.sync import RecipientPersister, SyncCoordinator
from campaign_sync.testing import InMemoryRecipientStore
from campaign_sync.utils.logging import setup_logging_from_config


@dataclass
class Pipeline:
    config: Config
    coordinator: SyncCoordinator
    backend: ibis.BaseBackend | None


def load_project(project_dir: Path, env: str | None, verbose: bool = False) -> Config:
    config = load_config(project_dir, env=env)
    if verbose:
        config.data.setdefault("logging", {})["level"] = "DEBUG"
    setup_logging_from_config(config.data, project_dir)
    return config


@asynccontextmanager
async def open_pipeline(
    config: Config, project_dir: Path, *, dry_run: bool = False, with_database: bool = True
) -> AsyncIterator[Pipeline]:
    """
    Build a SyncCoordinator from config and close its resources on exit.

    ``dry_run`` keeps campaign lookups on the configured database but writes
    recipients to memory. ``with_database=False`` skips the database entirely
    for commands that only read Drive.
    """
    retry_policy = RetryPolicy.from_config(config.get("drive.retry"), config.get("drive.request_timeout"))
    backend = connect_backend(config.database, project_dir) if with_database else None

    try:
        async with GoogleDriveClient(config.api_key, retry_policy=retry_policy) as drive:
            if backend is not None:
                matcher = CampaignMatcher(SqlCampaignStore(backend))
                store = InMemoryRecipientStore() if dry_run else SqlRecipientStore(backend)
            else:
                matcher = CampaignMatcher(_NoCampaigns())
                store = InMemoryRecipientStore()

            persister = RecipientPersister(
                store,
                batch_size=int(config.get("sync.persist_batch_size", 1000)),
                batch_delay=float(config.get("sync.batch_delay", 0.05)),
            )
            coordinator = SyncCoordinator(
                drive,
                CsvRecipientParser(),
                matcher,
                persister,
                folders=config.folders,
                default_folder=config.default_folder,
                max_runtime_ms=int(config.get("sync.max_runtime_ms", 50_000)),
                file_delay=float(config.get("sync.file_delay", 0.25)),
            )
            yield Pipeline(config=config, coordinator=coordinator, backend=backend)
    finally:
        if backend is not None:
            backend.disconnect()


class _NoCampaigns:
    async def find_campaign_by_names(self, candidates: list[str]) -> None:
        return None
