"""Unit tests for RetryPolicy and backoff strategies."""
from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from workforce_audit.resilience.retry import (
    ConstantBackoff,
    ExponentialBackoff,
    FullJitter,
    NoJitter,
    RetryPolicy,
)


def _policy(**kwargs):  # type: ignore[no-untyped-def]
    return RetryPolicy(backoff=ConstantBackoff(0), jitter=NoJitter(), **kwargs)


class TestBackoff:
    def test_exponential_grows_and_caps(self) -> None:
        b = ExponentialBackoff(base_delay=1.0, max_delay=5.0)
        assert [b.compute(a) for a in range(4)] == [1.0, 2.0, 4.0, 5.0]

    def test_constant(self) -> None:
        assert ConstantBackoff(2.0).compute(10) == 2.0

    def test_full_jitter_bounds(self) -> None:
        for _ in range(20):
            assert 0 <= FullJitter().apply(1.0) <= 1.0


class TestRetryPolicy:
    def test_succeeds_first_try(self) -> None:
        func = AsyncMock(return_value="ok")
        assert asyncio.run(_policy(max_attempts=3).execute_async(func)) == "ok"
        assert func.await_count == 1

    def test_retries_until_success(self) -> None:
        func = AsyncMock(side_effect=[OSError("a"), OSError("b"), "ok"])
        assert asyncio.run(_policy(max_attempts=3).execute_async(func)) == "ok"
        assert func.await_count == 3

    def test_reraises_after_max_attempts(self) -> None:
        func = AsyncMock(side_effect=OSError("down"))
        with pytest.raises(OSError):
            asyncio.run(_policy(max_attempts=2).execute_async(func))
        assert func.await_count == 2

    def test_non_retryable_is_not_retried(self) -> None:
        func = AsyncMock(side_effect=ValueError("bad"))
        policy = _policy(max_attempts=5, retryable_exceptions=(OSError,))
        with pytest.raises(ValueError):
            asyncio.run(policy.execute_async(func))
        assert func.await_count == 1

    def test_invalid_max_attempts(self) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)
