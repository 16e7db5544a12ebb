"""
Retry with exponential backoff for outbound provider calls.

Retries live at the adapter boundary: a call either eventually succeeds or
raises its last error, and the pipeline sees a single outcome per step.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, Tuple, Type, TypeVar

import httpx
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (httpx.TransportError,)
"""Connection errors, timeouts and protocol errors."""

CONNECT_ERRORS: Tuple[Type[BaseException], ...] = (httpx.ConnectError, httpx.ConnectTimeout)
"""Errors raised before the request reached the provider."""


class RetryPolicy(BaseModel):
    """Retry policy for provider calls.

    Args:
        max_attempts: Maximum number of attempts (including the first call)
        base_delay_s: Base delay in seconds for exponential backoff
        max_delay_s: Maximum delay in seconds (caps exponential growth)
        jitter: Jitter as fraction of delay (0.15 = +/-15% randomization)
        retry_on_status: HTTP status codes that trigger retries
    """

    model_config = {"frozen": True}

    max_attempts: int = Field(default=3, ge=1)
    base_delay_s: float = Field(default=0.5, ge=0.0)
    max_delay_s: float = Field(default=8.0, ge=0.0)
    jitter: float = Field(default=0.15, ge=0.0, le=1.0)
    retry_on_status: tuple[int, ...] = (429, 500, 502, 503, 504)

    @field_validator("max_delay_s")
    @classmethod
    def validate_max_delay(cls, v: float, info) -> float:
        """Ensure max_delay_s >= base_delay_s."""
        base = info.data.get("base_delay_s", 0.5)
        if v < base:
            raise ValueError("max_delay_s must be >= base_delay_s")
        return v

    def compute_delay(self, attempt: int) -> float:
        """Compute retry delay with exponential backoff and jitter.

        Args:
            attempt: Attempt number (1 = first retry after initial failure)

        Returns:
            Delay in seconds before next retry
        """
        delay: float = min(self.max_delay_s, self.base_delay_s * (2 ** (attempt - 1)))
        if self.jitter > 0:
            spread: float = delay * self.jitter
            delay = max(0.0, delay + random.uniform(-spread, spread))
        return delay

    def should_retry(self, exc: BaseException, retry_exceptions: Tuple[Type[BaseException], ...]) -> bool:
        if isinstance(exc, httpx.HTTPStatusError):
            return exc.response.status_code in self.retry_on_status
        return isinstance(exc, retry_exceptions)


NO_RETRY = RetryPolicy(max_attempts=1)


async def call_with_retry(
    fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    retry_exceptions: Tuple[Type[BaseException], ...] = TRANSIENT_ERRORS,
    description: str = "provider call",
) -> T:
    """Await `fn()` until it succeeds or the policy gives up.

    Args:
        fn: Zero-argument coroutine factory; called once per attempt.
        policy: Retry policy.
        retry_exceptions: Exception types considered transient.
        description: Label used in log messages.

    Returns:
        The result of the first successful attempt.

    Raises:
        The error of the last attempt, or the first non-retryable error.
    """
    attempt = 1
    while True:
        try:
            return await fn()
        except Exception as exc:
            if attempt >= policy.max_attempts or not policy.should_retry(exc, retry_exceptions):
                raise
            delay = policy.compute_delay(attempt)
            logger.warning(
                "%s failed (attempt %d/%d): %s; retrying in %.2fs",
                description, attempt, policy.max_attempts, exc, delay,
            )
            await asyncio.sleep(delay)
            attempt += 1
