"""
Retry Backoff - Exception Hierarchy.

Engine sentinels and the non-retryable marker.
"""

from .base import (
    TerminationReason,
    BackoffError,
    MaxRetriesExceeded,
    MaxElapsedTimeExceeded,
    BackoffCancelled,
    PermanentError,
    permanent,
    find_permanent,
)

__all__ = [
    "TerminationReason",
    "BackoffError",
    "MaxRetriesExceeded",
    "MaxElapsedTimeExceeded",
    "BackoffCancelled",
    "PermanentError",
    "permanent",
    "find_permanent",
]
