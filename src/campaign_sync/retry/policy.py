"""
Retry policy for outbound network calls.

Exponential backoff with jitter, a hard cap on the delay, and a per-request
timeout after which the in-flight call is cancelled.
"""

import random
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple, Type

import aiohttp

from campaign_sync.exceptions import DriveHTTPError

NETWORK_EXCEPTIONS: Tuple[Type[BaseException], ...] = (
    TimeoutError,
    aiohttp.ClientError,
    DriveHTTPError,
)


@dataclass
class RetryPolicy:
    """
    Configuration for retry behavior when a network call fails.

    Examples:
        >>> policy = RetryPolicy(max_attempts=3)

        >>> policy = RetryPolicy(
        ...     max_attempts=5,
        ...     initial_delay=2.0,
        ...     max_delay=60.0,
        ...     timeout=10.0,
        ... )
    """

    # Maximum number of retry attempts (total executions = max_attempts + 1)
    max_attempts: int = 3

    # Initial delay before first retry (seconds)
    initial_delay: float = 0.5

    # Maximum delay between retries (seconds)
    max_delay: float = 8.0

    # Exponential backoff base (delay = initial_delay * base^attempt)
    exponential_base: float = 2.0

    # Add random jitter (±25% of delay)
    jitter: bool = True

    # Per-attempt timeout in seconds (None = no timeout)
    timeout: Optional[float] = 30.0

    # Only retry these exception types (None = retry all exceptions)
    retryable_exceptions: Optional[Tuple[Type[BaseException], ...]] = NETWORK_EXCEPTIONS

    def __post_init__(self):
        """Validate configuration."""
        if self.max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        if self.initial_delay <= 0:
            raise ValueError("initial_delay must be > 0")
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must be >= initial_delay")
        if self.exponential_base < 1.0:
            raise ValueError("exponential_base must be >= 1.0")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

    @classmethod
    def from_config(cls, retry_config: dict[str, Any] | None, timeout: float | None = None) -> "RetryPolicy":
        """Build a policy from the ``drive.retry`` config section."""
        retry_config = retry_config or {}
        return cls(
            max_attempts=int(retry_config.get("max_attempts", 3)),
            initial_delay=float(retry_config.get("initial_delay", 0.5)),
            max_delay=float(retry_config.get("max_delay", 8.0)),
            exponential_base=float(retry_config.get("exponential_base", 2.0)),
            jitter=bool(retry_config.get("jitter", True)),
            timeout=float(timeout) if timeout is not None else 30.0,
        )

    def should_retry(self, exception: BaseException, attempt: int) -> bool:
        """
        Determine if we should retry after this exception.

        Args:
            exception: The exception that occurred
            attempt: Current attempt number (0-indexed)
        """
        if attempt >= self.max_attempts:
            return False

        if self.retryable_exceptions is not None:
            return isinstance(exception, self.retryable_exceptions)

        return True

    def get_delay(self, attempt: int) -> float:
        """
        Calculate delay before next retry using exponential backoff.

        Implements: delay = min(initial_delay * base^attempt * jitter, max_delay)
        """
        delay = self.initial_delay * (self.exponential_base**attempt)

        if self.jitter:
            delay *= random.uniform(0.75, 1.25)

        # Cap after jitter so max_delay is a hard upper bound
        return min(delay, self.max_delay)


@dataclass
class RetryState:
    """Retry history for one operation, kept for logging."""

    operation: str
    attempt: int = 0
    total_attempts: int = 0
    exceptions: list = field(default_factory=list)
    delays: list = field(default_factory=list)

    def record_attempt(self, exception: Optional[BaseException] = None):
        self.total_attempts += 1
        if exception is not None:
            self.exceptions.append(
                {
                    "attempt": self.attempt,
                    "exception_type": type(exception).__name__,
                    "exception_message": str(exception),
                }
            )

    def record_delay(self, delay: float):
        self.delays.append(delay)


DEFAULT_RETRY_POLICY = RetryPolicy()

NO_RETRY_POLICY = RetryPolicy(max_attempts=0)
