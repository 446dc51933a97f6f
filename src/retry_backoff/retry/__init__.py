"""
Retry Backoff - Retry Logic.

Configurable exponential or constant backoff with jitter and cancellation.
"""

from .config import (
    BackoffConfig,
    Option,
    RetryCallback,
    max_retries,
    exponential,
    multiplier,
    interval,
    max_interval,
    randomization_factor,
    max_elapsed_time,
    on_retry,
)
from .backoff import (
    Backoff,
    Outcome,
    RetryState,
    classify,
    next_interval,
    apply_jitter,
    with_retry,
    async_with_retry,
)

__all__ = [
    "BackoffConfig",
    "Option",
    "RetryCallback",
    "max_retries",
    "exponential",
    "multiplier",
    "interval",
    "max_interval",
    "randomization_factor",
    "max_elapsed_time",
    "on_retry",
    "Backoff",
    "Outcome",
    "RetryState",
    "classify",
    "next_interval",
    "apply_jitter",
    "with_retry",
    "async_with_retry",
]
