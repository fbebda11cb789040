"""Retry helpers with exponential backoff for transient database errors."""

import asyncio
import random
from dataclasses import dataclass
from functools import wraps
from typing import Any, Awaitable, Callable, Optional, Type, TypeVar

import structlog
from pymongo.errors import AutoReconnect, NetworkTimeout, ServerSelectionTimeoutError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

TRANSIENT_DATABASE_ERRORS: tuple[Type[Exception], ...] = (
    AutoReconnect,
    NetworkTimeout,
    ServerSelectionTimeoutError,
)


@dataclass
class RetryConfig:
    """Configuration for retry behavior with exponential backoff.

    Attributes:
        max_retries: Maximum number of retry attempts
        initial_delay: Initial delay in seconds before first retry
        max_delay: Maximum delay in seconds between retries
        exponential_base: Base for exponential backoff calculation
        jitter: Whether to randomize delays between 50% and 100%
        retryable_exceptions: Exception types that trigger a retry
    """

    max_retries: int = 3
    initial_delay: float = 0.5
    max_delay: float = 10.0
    exponential_base: float = 2.0
    jitter: bool = True
    retryable_exceptions: tuple[Type[Exception], ...] = TRANSIENT_DATABASE_ERRORS

    def calculate_delay(self, attempt: int) -> float:
        """Delay before the retry following `attempt` (0-indexed)."""
        delay = min(
            self.initial_delay * (self.exponential_base**attempt),
            self.max_delay,
        )
        if self.jitter:
            delay = delay * (0.5 + random.random() * 0.5)
        return delay


def async_retry_with_backoff(
    config: Optional[RetryConfig] = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Decorator for retrying coroutine functions with exponential backoff.

    Only exceptions listed in config.retryable_exceptions are retried;
    anything else propagates immediately. The last error is re-raised
    once retries are exhausted.

    Example:
        @async_retry_with_backoff(RetryConfig(max_retries=5))
        async def load(place_id):
            return await repository.get_by_id(place_id)
    """
    if config is None:
        config = RetryConfig()

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except config.retryable_exceptions as e:
                    if attempt >= config.max_retries:
                        logger.error(
                            "Max retries exhausted",
                            function=func.__name__,
                            attempt=attempt + 1,
                            max_retries=config.max_retries,
                            error=str(e),
                        )
                        raise

                    delay = config.calculate_delay(attempt)
                    logger.warning(
                        "Retrying after failure",
                        function=func.__name__,
                        attempt=attempt + 1,
                        max_retries=config.max_retries,
                        delay_seconds=round(delay, 2),
                        error=str(e),
                    )
                    await asyncio.sleep(delay)
                    attempt += 1

        return wrapper

    return decorator
