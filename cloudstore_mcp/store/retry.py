"""Retry with exponential backoff and full jitter for remote API calls.

Rate-limit (429) and server (5xx) responses and network failures are
retried up to a bounded number of attempts. Once attempts run out the
failure surfaces as a ``BackendError``, which tool handlers report like
any other domain failure.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx

from .errors import BackendError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Exceptions that should trigger retry
RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    ConnectionError,
    TimeoutError,
    httpx.TransportError,
)

# HTTP status codes that should trigger retry
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429, 500, 502, 503, 504})


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff settings."""

    max_attempts: int = 4
    base_delay: float = 0.5
    max_delay: float = 8.0

    @classmethod
    def from_settings(cls, settings: Any) -> "RetryPolicy":
        return cls(
            max_attempts=settings.max_retries,
            base_delay=settings.retry_base_delay_seconds,
            max_delay=settings.retry_max_delay_seconds,
        )

    def backoff(self, attempt: int, retry_after: float | None = None) -> float:
        """Delay before the next attempt (``attempt`` counts from 0).

        A server-supplied ``Retry-After`` wins, capped at ``max_delay``.
        Otherwise full jitter over ``base_delay * 2**attempt``.
        """
        if retry_after is not None:
            return min(max(retry_after, 0.0), self.max_delay)
        ceiling = min(self.max_delay, self.base_delay * (2**attempt))
        return random.uniform(0, ceiling)


def is_retryable(exc: Exception) -> bool:
    """Whether an exception represents a transient failure."""
    if isinstance(exc, BackendError):
        return exc.retryable or exc.status in RETRYABLE_STATUS_CODES
    return isinstance(exc, RETRYABLE_EXCEPTIONS)


def _as_backend_error(exc: Exception, attempts: int) -> BackendError:
    if isinstance(exc, BackendError):
        message = str(exc)
        status = exc.status
    else:
        message = f"{type(exc).__name__}: {exc}"
        status = None
    return BackendError(
        f"Remote API unavailable after {attempts} attempt(s): {message}",
        status=status,
        retryable=True,
    )


async def call_with_retry(
    func: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    label: str = "request",
) -> T:
    """Await ``func()`` until it succeeds, fails terminally or attempts run out.

    Args:
        func: Zero-argument coroutine factory, called once per attempt
        policy: Attempt bound and backoff curve
        sleep: Awaitable sleep, replaceable in tests
        label: Operation name used in log messages

    Returns:
        Whatever ``func`` returns on its first successful attempt

    Raises:
        BackendError: After the last retryable failure
        Exception: Non-retryable failures propagate unchanged
    """
    attempts = max(policy.max_attempts, 1)
    for attempt in range(attempts):
        try:
            return await func()
        except Exception as e:
            if not is_retryable(e):
                raise
            if attempt == attempts - 1:
                logger.error(f"{label} failed after {attempts} attempts: {e}")
                raise _as_backend_error(e, attempts) from e
            delay = policy.backoff(attempt, getattr(e, "retry_after", None))
            logger.warning(
                f"{label} attempt {attempt + 1}/{attempts} failed: {e}. "
                f"Retrying in {delay:.2f}s..."
            )
            await sleep(delay)
    raise AssertionError("unreachable")

