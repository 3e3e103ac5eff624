"""Resilience – retry with configurable backoff and jitter strategies."""
from workforce_audit.resilience.retry.backoff import (
    BackoffStrategy,
    ConstantBackoff,
    ExponentialBackoff,
    FullJitter,
    JitterStrategy,
    NoJitter,
)
from workforce_audit.resilience.retry.policy import RetryPolicy

__all__ = [
    "BackoffStrategy",
    "ConstantBackoff",
    "ExponentialBackoff",
    "FullJitter",
    "JitterStrategy",
    "NoJitter",
    "RetryPolicy",
]
