"""Tests for the provider retry policy."""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from app.util.retry import CONNECT_ERRORS, RetryPolicy, call_with_retry

FAST = RetryPolicy(max_attempts=3, base_delay_s=0.0, max_delay_s=0.0)


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://api.example/v1/thing")
    return httpx.HTTPStatusError("error", request=request, response=httpx.Response(status, request=request))


class TestRetryPolicy:
    def test_delay_grows_exponentially_and_is_capped(self) -> None:
        policy = RetryPolicy(base_delay_s=0.5, max_delay_s=2.0, jitter=0.0)
        assert [policy.compute_delay(n) for n in (1, 2, 3, 4)] == [0.5, 1.0, 2.0, 2.0]

    def test_jitter_stays_within_spread(self) -> None:
        policy = RetryPolicy(base_delay_s=1.0, max_delay_s=1.0, jitter=0.2)
        for _ in range(50):
            assert 0.8 <= policy.compute_delay(1) <= 1.2

    def test_max_delay_below_base_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(base_delay_s=2.0, max_delay_s=1.0)


class TestCallWithRetry:
    @pytest.mark.asyncio
    async def test_transient_error_then_success(self) -> None:
        fn = AsyncMock(side_effect=[httpx.ReadTimeout("slow"), "ok"])
        assert await call_with_retry(fn, FAST) == "ok"
        assert fn.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self) -> None:
        fn = AsyncMock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(httpx.ConnectError):
            await call_with_retry(fn, FAST)
        assert fn.await_count == 3

    @pytest.mark.asyncio
    async def test_retryable_status_is_retried(self) -> None:
        fn = AsyncMock(side_effect=[_status_error(429), _status_error(503), "ok"])
        assert await call_with_retry(fn, FAST) == "ok"

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self) -> None:
        fn = AsyncMock(side_effect=_status_error(400))
        with pytest.raises(httpx.HTTPStatusError):
            await call_with_retry(fn, FAST)
        assert fn.await_count == 1

    @pytest.mark.asyncio
    async def test_restricted_exceptions_skip_read_timeouts(self) -> None:
        fn = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
        with pytest.raises(httpx.ReadTimeout):
            await call_with_retry(fn, FAST, retry_exceptions=CONNECT_ERRORS)
        assert fn.await_count == 1
