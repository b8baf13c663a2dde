"""Retry policy for announcement delivery."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import aiohttp

__all__ = ["RetryPolicy", "TRANSIENT_ERRORS", "FIRST_SERVER_ERROR_CODE", "is_transient", "call_with_retry"]

logger = logging.getLogger(__name__)

T = TypeVar("T")

FIRST_SERVER_ERROR_CODE = 500

TRANSIENT_ERRORS = (
    aiohttp.ClientConnectionError,  # refused, reset, DNS, OS-level socket errors
    aiohttp.ClientPayloadError,
    asyncio.TimeoutError,
)


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """How often a single announcement is attempted.

    An announcement is worth a couple of quick retries, but never more than
    a fraction of the poll interval: the next tick brings a fresh message.

    Attributes:
        attempts: Total attempts (1 = no retry).
        delays_sec: Backoff before attempt 2, 3, ...; the last value repeats.
    """

    attempts: int = 3
    delays_sec: tuple[float, ...] = (0.2, 0.5, 1.0)

    def delay_for(self, attempt: int) -> float:
        """Return the backoff after the given zero-based failed attempt."""
        return self.delays_sec[min(attempt, len(self.delays_sec) - 1)]


def is_transient(exc: BaseException) -> bool:
    """Return True for errors where the same request may succeed later.

    Connection problems and 5xx answers are transient; 4xx answers mean the
    webhook rejected the message and are not.
    """
    if isinstance(exc, aiohttp.ClientResponseError):
        return exc.status >= FIRST_SERVER_ERROR_CODE
    return isinstance(exc, TRANSIENT_ERRORS)


async def call_with_retry(
    fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    what: str = "request",
) -> T:
    """Await ``fn()`` until it succeeds or the policy is exhausted.

    Args:
        fn: Zero-argument coroutine function performing one attempt.
        policy: Attempt count and backoff.
        what: Description used in log messages.

    Returns:
        Result of the first successful attempt.

    Raises:
        Exception: The last transient error, or the first permanent one.
    """
    for attempt in range(policy.attempts):
        try:
            return await fn()
        except Exception as e:
            if not is_transient(e) or attempt == policy.attempts - 1:
                logger.debug(f"{what} failed after {attempt + 1} attempt(s): {e}")
                raise
            delay = policy.delay_for(attempt)
            logger.debug(f"{what} attempt {attempt + 1}/{policy.attempts} failed, retrying in {delay}s: {e}")
            await asyncio.sleep(delay)

    raise RuntimeError(f"{what}: retry policy allows no attempts")
