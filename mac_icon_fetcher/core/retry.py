"""Retry with exponential backoff for async item workflows."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """Configuration for retry behavior"""
    attempts: int = 2  # Retries after the first attempt
    initial_delay: float = 0.5  # Initial delay in seconds
    backoff_multiplier: float = 1.5  # Exponential backoff multiplier
    max_delay: float = 30.0  # Maximum delay in seconds


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    description: str = "operation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await ``fn()`` and retry on exception until the budget is spent.

    Args:
        fn: Zero-argument coroutine factory, called once per attempt
        policy: Retry budget and delays
        description: Label used in log messages
        sleep: Delay function (injectable for tests)

    Returns:
        Result of the first successful attempt

    Raises:
        The exception of the final attempt
    """
    policy = policy or RetryPolicy()
    remaining = policy.attempts
    delay = policy.initial_delay

    while True:
        try:
            return await fn()
        except Exception as e:
            if remaining <= 0:
                raise
            logger.debug(f"{description} failed ({e}); retrying in {delay:.2f}s, {remaining} left")
            await sleep(delay)
            remaining -= 1
            delay = min(delay * policy.backoff_multiplier, policy.max_delay)
