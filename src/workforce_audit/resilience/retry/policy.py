"""Resilience – RetryPolicy."""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

from workforce_audit.observability.logging import get_logger
from workforce_audit.resilience.retry.backoff import (
    BackoffStrategy,
    ExponentialBackoff,
    FullJitter,
    JitterStrategy,
)

T = TypeVar("T")
logger = get_logger(__name__)


class RetryPolicy:
    """Retry an async operation with backoff.

    Only exceptions matching *retryable_exceptions* are retried; the last
    failure is re-raised once *max_attempts* is exhausted.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        backoff: BackoffStrategy | None = None,
        jitter: JitterStrategy | None = None,
        retryable_exceptions: tuple[type[BaseException], ...] = (Exception,),
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts
        self.backoff = backoff or ExponentialBackoff()
        self.jitter = jitter or FullJitter()
        self.retryable_exceptions = retryable_exceptions

    def _should_retry(self, exc: BaseException) -> bool:
        return isinstance(exc, self.retryable_exceptions)

    async def execute_async(self, func: Callable[[], Awaitable[T]]) -> T:
        """Execute *func* asynchronously with retry."""
        attempt = 1
        while True:
            try:
                return await func()
            except Exception as exc:
                if not self._should_retry(exc) or attempt >= self.max_attempts:
                    raise
                delay = self.jitter.apply(self.backoff.compute(attempt))
                logger.warning(
                    "retrying_after_failure",
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    delay_seconds=round(delay, 3),
                    error=repr(exc),
                )
                await asyncio.sleep(delay)
                attempt += 1


__all__ = ["RetryPolicy"]
