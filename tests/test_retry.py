"""
Tests for the retry helper.
"""

import asyncio

import aiohttp
import pytest

from campaign_sync.exceptions import DriveHTTPError
from campaign_sync.retry import DEFAULT_RETRY_POLICY, NO_RETRY_POLICY, RetryManager, RetryPolicy, RetryState


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


class TestRetryPolicy:
    """Tests for RetryPolicy configuration."""

    def test_default_values(self):
        """Test default policy values."""
        policy = RetryPolicy()
        assert policy.max_attempts == 3
        assert policy.initial_delay == 0.5
        assert policy.max_delay == 8.0
        assert policy.exponential_base == 2.0
        assert policy.jitter is True
        assert policy.timeout == 30.0

    def test_validation_max_attempts(self):
        with pytest.raises(ValueError, match="max_attempts must be >= 0"):
            RetryPolicy(max_attempts=-1)

    def test_validation_initial_delay(self):
        with pytest.raises(ValueError, match="initial_delay must be > 0"):
            RetryPolicy(initial_delay=0)

    def test_validation_max_delay(self):
        with pytest.raises(ValueError, match="max_delay must be >= initial_delay"):
            RetryPolicy(initial_delay=5.0, max_delay=1.0)

    def test_validation_exponential_base(self):
        with pytest.raises(ValueError, match="exponential_base must be >= 1.0"):
            RetryPolicy(exponential_base=0.5)

    def test_validation_timeout(self):
        with pytest.raises(ValueError, match="timeout must be > 0"):
            RetryPolicy(timeout=0)

    def test_from_config(self):
        policy = RetryPolicy.from_config({"max_attempts": 5, "initial_delay": 1, "jitter": False}, timeout=12)
        assert policy.max_attempts == 5
        assert policy.initial_delay == 1.0
        assert policy.jitter is False
        assert policy.timeout == 12.0

    def test_from_empty_config(self):
        assert RetryPolicy.from_config(None) == DEFAULT_RETRY_POLICY


class TestDelays:
    """Tests for backoff delay calculation."""

    def test_exponential_without_jitter(self):
        policy = RetryPolicy(initial_delay=0.5, max_delay=8.0, jitter=False)
        assert [policy.get_delay(a) for a in range(5)] == [0.5, 1.0, 2.0, 4.0, 8.0]

    def test_capped_at_max_delay(self):
        policy = RetryPolicy(initial_delay=0.5, max_delay=8.0, jitter=False)
        assert policy.get_delay(10) == 8.0

    def test_jitter_stays_within_bounds(self):
        policy = RetryPolicy(initial_delay=1.0, max_delay=100.0, jitter=True)
        for _ in range(50):
            assert 1.5 <= policy.get_delay(1) <= 2.5

    def test_jitter_never_exceeds_cap(self):
        policy = RetryPolicy(initial_delay=1.0, max_delay=2.0, jitter=True)
        for _ in range(50):
            assert policy.get_delay(1) <= 2.0


class TestShouldRetry:
    """Tests for retry decisions."""

    def test_network_errors_are_retryable(self):
        policy = RetryPolicy()
        assert policy.should_retry(TimeoutError(), 0)
        assert policy.should_retry(aiohttp.ClientConnectionError(), 0)
        assert policy.should_retry(DriveHTTPError(500, "https://example.com"), 0)

    def test_other_errors_are_not(self):
        assert not RetryPolicy().should_retry(ValueError("bad"), 0)

    def test_attempts_exhausted(self):
        assert not RetryPolicy(max_attempts=2).should_retry(TimeoutError(), 2)

    def test_no_retry_policy(self):
        assert not NO_RETRY_POLICY.should_retry(TimeoutError(), 0)


class TestRetryManager:
    """Tests for RetryManager execution."""

    @pytest.mark.asyncio
    async def test_success_first_try(self):
        sleep = RecordingSleep()
        manager = RetryManager(RetryPolicy(jitter=False), sleep=sleep)

        async def ok():
            return "done"

        assert await manager.execute(ok) == "done"
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        sleep = RecordingSleep()
        manager = RetryManager(RetryPolicy(max_attempts=3, jitter=False), sleep=sleep)
        calls = []

        async def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise DriveHTTPError(502, "https://example.com", "Bad Gateway")
            return "ok"

        assert await manager.execute(flaky, operation="flaky") == "ok"
        assert len(calls) == 3
        assert sleep.delays == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_reraises_last_exception(self):
        sleep = RecordingSleep()
        manager = RetryManager(RetryPolicy(max_attempts=2, jitter=False), sleep=sleep)
        calls = []

        async def always_fails():
            calls.append(1)
            raise DriveHTTPError(500, "https://example.com", body=f"attempt {len(calls)}")

        with pytest.raises(DriveHTTPError, match="attempt 3"):
            await manager.execute(always_fails)
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_non_retryable_raises_immediately(self):
        sleep = RecordingSleep()
        manager = RetryManager(RetryPolicy(max_attempts=3), sleep=sleep)
        calls = []

        async def broken():
            calls.append(1)
            raise ValueError("not json")

        with pytest.raises(ValueError):
            await manager.execute(broken)
        assert len(calls) == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_timeout_cancels_attempt(self):
        sleep = RecordingSleep()
        manager = RetryManager(RetryPolicy(max_attempts=1, jitter=False, timeout=0.01), sleep=sleep)
        calls = []

        async def hangs():
            calls.append(1)
            await asyncio.sleep(10)

        with pytest.raises(TimeoutError):
            await manager.execute(hangs)
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_policy_override(self):
        sleep = RecordingSleep()
        manager = RetryManager(RetryPolicy(max_attempts=5), sleep=sleep)
        calls = []

        async def fails():
            calls.append(1)
            raise TimeoutError()

        with pytest.raises(TimeoutError):
            await manager.execute(fails, policy=NO_RETRY_POLICY)
        assert len(calls) == 1


class TestRetryState:
    """Tests for RetryState bookkeeping."""

    def test_records_attempts_and_delays(self):
        state = RetryState(operation="download")
        state.record_attempt(exception=TimeoutError("slow"))
        state.record_delay(0.5)
        state.record_attempt()

        assert state.total_attempts == 2
        assert state.exceptions[0]["exception_type"] == "TimeoutError"
        assert state.delays == [0.5]
