"""Exponential-backoff retry for flaky async operations.

Used for mailbox operations (mark as read, delete) that fail transiently.
Attempts are strictly sequential and there is no jitter.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from ..config.settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExhausted(Exception):
    """Raised when every attempt of a retried operation failed."""

    def __init__(self, context: str, attempts: int, last_error: BaseException):
        self.context = context
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Failed {context} after {attempts} attempts: {last_error}")


@dataclass
class RetryOptions:
    """Backoff configuration. Delays are in seconds."""

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    backoff_multiplier: float = 2.0

    @classmethod
    def from_settings(cls) -> "RetryOptions":
        return cls(
            max_attempts=settings.retry_max_attempts,
            initial_delay=settings.retry_initial_delay,
            max_delay=settings.retry_max_delay,
            backoff_multiplier=settings.retry_backoff_multiplier,
        )


async def retry(
    operation: Callable[[], Awaitable[T]],
    options: Optional[RetryOptions] = None,
    context: str = "operation",
) -> T:
    """
    Await an operation, retrying failures with exponential backoff.

    Args:
        operation: Zero-argument coroutine function to call
        options: Backoff configuration (default: RetryOptions())
        context: Short description for logs and the final error,
            e.g. "delete UID 123"

    Returns:
        The operation's result from the first successful attempt

    Raises:
        RetryExhausted: After max_attempts failures, chained to the last error
    """
    opts = options or RetryOptions()
    if opts.max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    delay = opts.initial_delay
    last_error: Optional[Exception] = None

    for attempt in range(1, opts.max_attempts + 1):
        try:
            return await operation()
        except Exception as e:
            last_error = e
            if attempt == opts.max_attempts:
                break
            logger.debug(
                "[RETRY] Attempt %d/%d failed for %s: %s",
                attempt,
                opts.max_attempts,
                context,
                e,
            )
            logger.debug("[RETRY] Retrying %s in %.2fs", context, delay)
            await asyncio.sleep(delay)
            delay = min(delay * opts.backoff_multiplier, opts.max_delay)

    logger.warning("[RETRY] Failed %s after %d attempts", context, opts.max_attempts)
    raise RetryExhausted(context, opts.max_attempts, last_error) from last_error
