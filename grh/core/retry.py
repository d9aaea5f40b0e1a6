"""Retry strategy for transient store failures.

Exponential backoff with jitter. Used by notification dispatch so a brief
database hiccup does not lose a notification.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from sqlalchemy.exc import DataError, DBAPIError, IntegrityError, OperationalError

from grh.core.config import settings

__all__ = [
    "PERMANENT_STORE_ERRORS",
    "RetryPolicy",
    "TRANSIENT_STORE_ERRORS",
    "with_retries",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_STORE_ERRORS: tuple[type[Exception], ...] = (
    OperationalError,
    DBAPIError,
    ConnectionError,
    TimeoutError,
)

# Subclasses of DBAPIError that will fail the same way on every attempt
# (constraint violations, bad values). Never retried.
PERMANENT_STORE_ERRORS: tuple[type[Exception], ...] = (IntegrityError, DataError)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry settings.

    Attributes:
        max_retries: Retries after the first attempt (0 disables retrying).
        base_delay_ms: Delay before the first retry; doubles each attempt.
        max_delay_ms: Upper bound on a single delay.
    """

    max_retries: int = 3
    base_delay_ms: int = 100
    max_delay_ms: int = 2000

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_retries=settings.notification_max_retries,
            base_delay_ms=settings.notification_retry_base_delay_ms,
            max_delay_ms=settings.notification_retry_max_delay_ms,
        )


async def with_retries(
    func: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    retryable_errors: tuple[type[Exception], ...] = TRANSIENT_STORE_ERRORS,
) -> T:
    """Execute function with exponential backoff retry.

    Args:
        func: Async function to execute (no arguments).
        policy: Retry settings.
        retryable_errors: Tuple of error types that should trigger retry.

    Returns:
        Result from successful function execution.

    Raises:
        The last retryable error once all retries are exhausted. Errors
        outside ``retryable_errors`` and ``PERMANENT_STORE_ERRORS``
        propagate immediately.
    """
    last_error: Exception | None = None

    for attempt in range(policy.max_retries + 1):
        try:
            return await func()
        except retryable_errors as e:
            if isinstance(e, PERMANENT_STORE_ERRORS):
                raise
            last_error = e

            if attempt == policy.max_retries:
                break

            base_delay = policy.base_delay_ms * (2**attempt)
            jitter = random.uniform(0, base_delay * 0.1)  # nosec B311
            delay = min(base_delay + jitter, policy.max_delay_ms) / 1000

            logger.warning(
                "Store error (attempt %d/%d): %s. Retrying in %.2fs",
                attempt + 1,
                policy.max_retries + 1,
                e,
                delay,
            )

            await asyncio.sleep(delay)

    if last_error is not None:
        raise last_error
    raise RuntimeError("Retry loop exited without error or result")
