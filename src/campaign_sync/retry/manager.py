"""
Retry manager for executing coroutines with timeout and exponential backoff.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from campaign_sync.exceptions import RetryError
from campaign_sync.retry.policy import DEFAULT_RETRY_POLICY, RetryPolicy, RetryState
from campaign_sync.utils.logging import get_logger

logger = get_logger("campaign_sync.retry")

T = TypeVar("T")


class RetryManager:
    """
    Runs an async callable under a RetryPolicy.

    Each attempt is bounded by ``policy.timeout``; a timed-out attempt is
    cancelled and counts as a retryable failure. Sleeps between attempts are
    plain ``asyncio.sleep`` calls, so cancelling the caller cancels the wait.

    Examples:
        >>> manager = RetryManager(API_POLICY)
        >>> async def fetch():
        ...     async with session.get(url) as resp:
        ...         return await resp.text()
        >>> text = await manager.execute(fetch, operation="download report.csv")
    """

    def __init__(self, policy: RetryPolicy | None = None, sleep: Callable[[float], Awaitable[None]] | None = None):
        self.policy = policy or DEFAULT_RETRY_POLICY
        self._sleep = sleep or asyncio.sleep

    async def execute(
        self,
        func: Callable[[], Awaitable[T]],
        *,
        policy: RetryPolicy | None = None,
        operation: str | None = None,
    ) -> T:
        """
        Execute ``func`` with retry logic.

        Args:
            func: Zero-argument coroutine factory, called once per attempt
            policy: Override the manager's policy for this call
            operation: Label used in log messages

        Returns:
            Result of the first successful attempt

        Raises:
            Exception: The last exception once retries are exhausted or
                the exception is not retryable
        """
        policy = policy or self.policy
        state = RetryState(operation=operation or getattr(func, "__name__", "operation"))

        for attempt in range(policy.max_attempts + 1):
            state.attempt = attempt
            try:
                logger.debug(f"{state.operation} (attempt {attempt + 1}/{policy.max_attempts + 1})")
                if policy.timeout is not None:
                    result = await asyncio.wait_for(func(), timeout=policy.timeout)
                else:
                    result = await func()

                state.record_attempt()
                if attempt > 0:
                    logger.info(f"{state.operation} succeeded after {attempt + 1} attempts")
                return result

            except Exception as e:
                state.record_attempt(exception=e)

                if not policy.should_retry(e, attempt):
                    if attempt > 0:
                        logger.error(f"{state.operation} failed after {attempt + 1} attempts: {_describe(e)}")
                    raise

                delay = policy.get_delay(attempt)
                state.record_delay(delay)
                logger.warning(
                    f"{state.operation} attempt {attempt + 1} failed: {_describe(e)}. Retrying in {delay:.2f}s..."
                )
                await self._sleep(delay)

        raise RetryError(f"Retry logic error for {state.operation}")


def _describe(exc: BaseException) -> str:
    # TimeoutError from wait_for carries no message
    return str(exc) or type(exc).__name__
