"""
Tests for src/utils/retry.py
"""

import pytest

from src.core.errors import RelayFailure, RelayRejected
from src.utils.retry import backoff_delay, retry_async


class Flaky:
    """Async callable failing a fixed number of times."""

    def __init__(self, failures: int, error: Exception = None) -> None:
        self.failures = failures
        self.error = error or RelayFailure("temporary", status=503)
        self.calls = 0

    async def __call__(self, value):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return value * 2


class TestBackoffDelay:
    """Tests for the delay schedule."""

    def test_doubles(self):
        assert [backoff_delay(a, 1.0, 100.0) for a in range(4)] == [1.0, 2.0, 4.0, 8.0]

    def test_capped(self):
        assert backoff_delay(10, 2.0, 30.0) == 30.0


class TestRetryAsync:
    """Tests for retry_async."""

    @pytest.mark.asyncio
    async def test_first_try(self):
        call = Flaky(0)

        assert await retry_async(call, 4, base_delay=0) == 8
        assert call.calls == 1

    @pytest.mark.asyncio
    async def test_succeeds_after_retries(self):
        call = Flaky(2)

        assert await retry_async(call, 4, max_attempts=3, base_delay=0) == 8
        assert call.calls == 3

    @pytest.mark.asyncio
    async def test_raises_last_error(self):
        call = Flaky(5)

        with pytest.raises(RelayFailure):
            await retry_async(call, 4, max_attempts=3, base_delay=0)
        assert call.calls == 3

    @pytest.mark.asyncio
    async def test_other_errors_not_retried(self):
        call = Flaky(5, error=KeyError("nope"))

        with pytest.raises(KeyError):
            await retry_async(call, 4, max_attempts=3, base_delay=0)
        assert call.calls == 1

    @pytest.mark.asyncio
    async def test_rejected_call_not_retried(self):
        call = Flaky(5, error=RelayRejected("Roblox API returned 403", status=403))

        with pytest.raises(RelayRejected):
            await retry_async(call, 4, max_attempts=3, base_delay=0)
        assert call.calls == 1


class TestRelayFailureForStatus:
    """Tests for mapping HTTP statuses to relay errors."""

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 422])
    def test_client_errors_are_permanent(self, status):
        assert isinstance(RelayFailure.for_status("nope", status), RelayRejected)

    @pytest.mark.parametrize("status", [429, 500, 502, 503])
    def test_rate_limit_and_server_errors_retry(self, status):
        error = RelayFailure.for_status("busy", status)

        assert type(error) is RelayFailure
        assert error.status == status

    @pytest.mark.asyncio
    async def test_rate_limit_is_retried(self):
        call = Flaky(2, error=RelayFailure.for_status("slow down", 429))

        assert await retry_async(call, 4, max_attempts=3, base_delay=0) == 8
        assert call.calls == 3
