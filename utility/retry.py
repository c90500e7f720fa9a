# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-03
# Description: retry.py
# -----------------------------------------------------------------------------
"""
Shared exponential backoff helpers (tenacity) for provider + index calls.

    retry_async  -> re-invoke a coroutine while it raises a retryable exception
    poll_until   -> re-invoke a coroutine until its result satisfies a predicate
"""
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

T = TypeVar("T")


@dataclass(frozen=True)
class BackoffPolicy:
    max_attempts: int = 5
    base_delay: float = 1.0
    max_delay: float = 60.0
    jitter: float = 0.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay < 0 or self.jitter < 0:
            raise ValueError("base_delay and jitter must be >= 0")

    def wait_strategy(self):
        # base, 2*base, 4*base, ... capped at max_delay
        wait = wait_exponential(multiplier=self.base_delay, max=self.max_delay)
        if self.jitter > 0:
            wait = wait + wait_random(0, self.jitter)
        return wait


async def retry_async(
    fn: Callable[..., Awaitable[T]],
    *args: Any,
    policy: BackoffPolicy,
    retry_if: Callable[[BaseException], bool],
    logger: logging.Logger,
    **kwargs: Any,
) -> T:
    """
    Await fn(*args, **kwargs), retrying exceptions accepted by `retry_if`.
    The last exception is re-raised once attempts are exhausted.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=policy.wait_strategy(),
        retry=retry_if_exception(retry_if),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    return await retrying(fn, *args, **kwargs)


async def poll_until(
    fn: Callable[..., Awaitable[T]],
    *args: Any,
    policy: BackoffPolicy,
    is_done: Callable[[T], bool],
    logger: logging.Logger,
    **kwargs: Any,
) -> T:
    """
    Await fn until `is_done(result)` holds or attempts run out.
    Returns the last result either way; exceptions from fn propagate.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=policy.wait_strategy(),
        retry=retry_if_result(lambda result: not is_done(result)),
        before_sleep=before_sleep_log(logger, logging.INFO),
        retry_error_callback=lambda state: state.outcome.result(),
    )
    return await retrying(fn, *args, **kwargs)
