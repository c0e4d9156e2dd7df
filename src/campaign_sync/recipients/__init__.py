"""
Recipient records: CSV parsing and campaign matching.
"""

from campaign_sync.recipients.matcher import CampaignMatcher, campaign_name_candidates, strip_extension
from campaign_sync.recipients.parser import HEADER_MAP, CsvRecipientParser
from campaign_sync.recipients.types import (
    MUTABLE_FIELDS,
    RECIPIENT_FIELDS,
    Campaign,
    CampaignRecipient,
    StoredRecipient,
)

__all__ = [
    "Campaign",
    "CampaignRecipient",
    "StoredRecipient",
    "RECIPIENT_FIELDS",
    "MUTABLE_FIELDS",
    "CsvRecipientParser",
    "HEADER_MAP",
    "CampaignMatcher",
    "campaign_name_candidates",
    "strip_extension",
]
