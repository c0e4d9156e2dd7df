"""
Persistence: store protocols and the ibis-backed SQL implementation.
"""

from campaign_sync.store.base import CampaignStore, RecipientStore
from campaign_sync.store.connection import connect_backend
from campaign_sync.store.sql_store import (
    SqlCampaignStore,
    SqlRecipientStore,
    add_campaign,
    initialize_schema,
)

__all__ = [
    "CampaignStore",
    "RecipientStore",
    "SqlCampaignStore",
    "SqlRecipientStore",
    "add_campaign",
    "connect_backend",
    "initialize_schema",
]
