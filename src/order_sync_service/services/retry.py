"""Bounded retry for store operations that hit their deadline."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from order_sync_service.config import Settings
from order_sync_service.exceptions import DeadlineExceededError
from shared.constants import STORE_RETRY_ATTEMPTS, STORE_RETRY_DELAY

logger = structlog.get_logger()

T = TypeVar("T")


async def _sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Operation timed out, retrying",
        attempt=retry_state.attempt_number,
        max_attempts=retry_state.retry_object.stop.max_attempt_number,
        delay=retry_state.upcoming_sleep,
        error=str(error),
    )


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = STORE_RETRY_ATTEMPTS,
    initial_delay: float = STORE_RETRY_DELAY,
) -> T:
    """
    Run ``operation``, retrying only when it raises ``DeadlineExceededError``.

    The delay between attempts is constant. Any other exception propagates
    immediately; once ``max_attempts`` attempts have timed out the last
    deadline error propagates.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt
        max_attempts: Total number of attempts, including the first
        initial_delay: Seconds to wait before each retry

    Returns:
        The operation's result
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(initial_delay),
        retry=retry_if_exception_type(DeadlineExceededError),
        before_sleep=_log_retry,
        sleep=_sleep,
        reraise=True,
    )
    try:
        return await retrying(operation)
    except DeadlineExceededError as e:
        logger.error(
            "Operation timed out, giving up",
            max_attempts=max_attempts,
            error=str(e),
        )
        raise


@dataclass(frozen=True)
class RetryPolicy:
    """Retry settings bound to a single value, shared by the engine's components."""

    max_attempts: int = STORE_RETRY_ATTEMPTS
    initial_delay: float = STORE_RETRY_DELAY

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.store_retry_attempts,
            initial_delay=settings.store_retry_delay_seconds,
        )

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        return await run_with_retry(operation, self.max_attempts, self.initial_delay)
