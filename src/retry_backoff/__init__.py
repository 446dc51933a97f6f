"""
Retry Backoff - Retry operations with exponential backoff and jitter.

Build an engine from named options and hand it the operation:

    boff = Backoff(exponential(), max_retries(30), on_retry(log_failure))
    boff.execute(lambda cancel: flaky_call(), cancel=stop_event)
"""

from .clients import HTTPRetryClient
from .exceptions import (
    TerminationReason,
    BackoffError,
    MaxRetriesExceeded,
    MaxElapsedTimeExceeded,
    BackoffCancelled,
    PermanentError,
    permanent,
)
from .retry import (
    Backoff,
    BackoffConfig,
    max_retries,
    exponential,
    multiplier,
    interval,
    max_interval,
    randomization_factor,
    max_elapsed_time,
    on_retry,
    with_retry,
    async_with_retry,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Engine
    "Backoff",
    "BackoffConfig",
    "with_retry",
    "async_with_retry",
    # Options
    "max_retries",
    "exponential",
    "multiplier",
    "interval",
    "max_interval",
    "randomization_factor",
    "max_elapsed_time",
    "on_retry",
    # Exceptions
    "TerminationReason",
    "BackoffError",
    "MaxRetriesExceeded",
    "MaxElapsedTimeExceeded",
    "BackoffCancelled",
    "PermanentError",
    "permanent",
    # Clients
    "HTTPRetryClient",
]
