"""Unit tests for retry utilities with exponential backoff."""

from unittest.mock import AsyncMock, patch

import pytest
from pymongo.errors import AutoReconnect, DuplicateKeyError, NetworkTimeout

from campsite_ingest.utils.retry import (
    TRANSIENT_DATABASE_ERRORS,
    RetryConfig,
    async_retry_with_backoff,
)


@pytest.mark.unit
class TestRetryConfig:
    """Test RetryConfig dataclass."""

    def test_default_config(self):
        config = RetryConfig()

        assert config.max_retries == 3
        assert config.initial_delay == 0.5
        assert config.max_delay == 10.0
        assert config.jitter is True
        assert config.retryable_exceptions == TRANSIENT_DATABASE_ERRORS

    def test_calculate_delay_no_jitter(self):
        config = RetryConfig(initial_delay=0.5, max_delay=10.0, jitter=False)

        # 0.5 * 2^n
        assert config.calculate_delay(0) == 0.5
        assert config.calculate_delay(1) == 1.0
        assert config.calculate_delay(2) == 2.0

    def test_calculate_delay_with_max(self):
        config = RetryConfig(initial_delay=1.0, max_delay=5.0, jitter=False)

        assert config.calculate_delay(6) == 5.0

    def test_calculate_delay_with_jitter(self):
        config = RetryConfig(initial_delay=4.0, max_delay=100.0, jitter=True)

        for _ in range(20):
            assert 2.0 <= config.calculate_delay(0) <= 4.0


@pytest.mark.unit
class TestAsyncRetryWithBackoff:
    """Test async_retry_with_backoff decorator."""

    @pytest.mark.asyncio
    async def test_successful_first_attempt(self):
        calls = []

        @async_retry_with_backoff()
        async def lookup():
            calls.append(1)
            return "found"

        assert await lookup() == "found"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_retry_on_transient_error(self):
        outcomes = [AutoReconnect("primary stepped down"), NetworkTimeout("timed out"), "found"]

        @async_retry_with_backoff(RetryConfig(max_retries=3, jitter=False))
        async def lookup():
            outcome = outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        with patch(
            "campsite_ingest.utils.retry.asyncio.sleep", new_callable=AsyncMock
        ) as sleep:
            assert await lookup() == "found"

        assert [c.args[0] for c in sleep.await_args_list] == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_max_retries_exhausted(self):
        calls = []

        @async_retry_with_backoff(RetryConfig(max_retries=2, jitter=False))
        async def lookup():
            calls.append(1)
            raise AutoReconnect("connection lost")

        with patch("campsite_ingest.utils.retry.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(AutoReconnect):
                await lookup()

        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_non_retryable_error_propagates(self):
        calls = []

        @async_retry_with_backoff()
        async def insert():
            calls.append(1)
            raise DuplicateKeyError("E11000 duplicate key")

        with pytest.raises(DuplicateKeyError):
            await insert()

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_preserves_function_name(self):
        @async_retry_with_backoff()
        async def find_nearby():
            return []

        assert find_nearby.__name__ == "find_nearby"
