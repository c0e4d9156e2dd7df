"""
Retry helper shared by every outbound network call.
"""

from campaign_sync.retry.manager import RetryManager
from campaign_sync.retry.policy import (
    DEFAULT_RETRY_POLICY,
    NETWORK_EXCEPTIONS,
    NO_RETRY_POLICY,
    RetryPolicy,
    RetryState,
)

__all__ = [
    "RetryPolicy",
    "RetryState",
    "RetryManager",
    "DEFAULT_RETRY_POLICY",
    "NO_RETRY_POLICY",
    "NETWORK_EXCEPTIONS",
]
