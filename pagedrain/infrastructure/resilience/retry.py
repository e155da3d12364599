"""Retry-with-backoff executor for fallible async operations.

Re-invokes an operation until it succeeds or the attempt budget runs out,
sleeping `base_delay * 2**attempt` seconds between attempts. There is no
jitter and no cap on the delay. Only the last failure reaches the caller,
re-raised as is; earlier failures are logged and dropped.
"""

import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, TypeVar

from pagedrain.domain.events.batch_events import (
    EventListener, RetriesExhausted, RetryScheduled, dispatch_event
)
from pagedrain.domain.models.common import BackoffPolicy
from pagedrain.infrastructure.config.settings import get_retry_base_delay, get_retry_max_retries

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 5
DEFAULT_BASE_DELAY_S = 0.5  # 500 ms before the first retry


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay to wait after failed attempt `attempt` (zero-based)."""
    return base_delay * (2 ** attempt)


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY_S,
    *,
    retryable_exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    on_event: Optional[EventListener] = None,
) -> T:
    """Runs `operation` with up to `max_retries` retries and exponential backoff.

    Args:
        operation: Zero-argument callable returning an awaitable. It is
            invoked afresh on every attempt.
        max_retries: Retries after the first attempt, so at most
            `max_retries + 1` invocations.
        base_delay: Seconds to wait after the first failure; doubles after
            each further failure.
        retryable_exceptions: Exception types that trigger a retry. Anything
            else propagates immediately.
        on_event: Optional listener for RetryScheduled / RetriesExhausted.

    Returns:
        The result of the first successful invocation.

    Raises:
        ValueError: If `max_retries` or `base_delay` is negative.
        Exception: The last attempt's error once retries are exhausted, or a
            non-retryable error as soon as it occurs.
    """
    if max_retries < 0:
        raise ValueError(f"max_retries must be >= 0, got {max_retries}")
    if base_delay < 0:
        raise ValueError(f"base_delay must be >= 0, got {base_delay}")

    for attempt in range(max_retries + 1):
        try:
            return await operation()
        except retryable_exceptions as e:
            if attempt == max_retries:
                logger.error(f"Max retries reached. Operation failed: {e}")
                dispatch_event(
                    RetriesExhausted(attempts=attempt + 1, error_type=type(e).__name__, error_message=str(e)),
                    on_event,
                )
                raise

            delay = backoff_delay(attempt, base_delay)
            logger.warning(
                f"Attempt {attempt + 1}/{max_retries + 1} failed with {type(e).__name__}: {e}. "
                f"Retrying after {delay:.2f}s..."
            )
            dispatch_event(
                RetryScheduled(attempt_number=attempt + 1, delay_seconds=delay, error_type=type(e).__name__),
                on_event,
            )
            await asyncio.sleep(delay)

    # range(max_retries + 1) always returns or raises inside the loop
    raise AssertionError("unreachable: retry loop exited without result")


def with_retry(
    func: Callable[..., Awaitable[T]],
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY_S,
    *,
    retryable_exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    on_event: Optional[EventListener] = None,
) -> Callable[..., Awaitable[T]]:
    """Wraps an async callable so every call goes through retry_with_backoff.

    Typical use is wrapping a page fetch or a page handler before handing
    it to process_in_batches::

        fetch = with_retry(source.fetch_page, max_retries=3)
    """
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        return await retry_with_backoff(
            lambda: func(*args, **kwargs),
            max_retries,
            base_delay,
            retryable_exceptions=retryable_exceptions,
            on_event=on_event,
        )
    return wrapper


def backoff_policy_from_config() -> BackoffPolicy:
    """Reads the retry budget from settings (`retry.max_retries`, `retry.base_delay`)."""
    return BackoffPolicy(
        max_retries=get_retry_max_retries(DEFAULT_MAX_RETRIES),
        base_delay=get_retry_base_delay(DEFAULT_BASE_DELAY_S),
    )
