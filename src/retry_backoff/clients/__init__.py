"""
Retry Backoff - Clients.

Ready-made adapters that route I/O through the backoff engine.
"""

from .http import HTTPRetryClient, DEFAULT_RETRYABLE_STATUS_CODES

__all__ = [
    "HTTPRetryClient",
    "DEFAULT_RETRYABLE_STATUS_CODES",
]
