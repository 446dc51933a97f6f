"""
HTTP client adapter.

Sends httpx requests through the backoff engine, retrying transport
failures and retryable status codes.
"""

import asyncio
import logging
import threading
from typing import Set

import httpx

from ..exceptions import permanent
from ..retry import Backoff, BackoffConfig

logger = logging.getLogger(__name__)

DEFAULT_RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class HTTPRetryClient:
    """
    HTTP client whose requests are retried with backoff.

    Features:
    - Transport errors (connect failures, timeouts) are retried
    - Retryable status codes are retried
    - Any other 4xx/5xx stops immediately and raises httpx.HTTPStatusError
    - Sync and async requests, both cancellable
    """

    def __init__(
        self,
        base_url: str = "",
        backoff: Backoff | None = None,
        retryable_status_codes: Set[int] | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Prefix for relative request URLs
            backoff: Engine driving retries (default: conservative preset)
            retryable_status_codes: Status codes that trigger a retry
            timeout: Per-attempt request timeout in seconds
            transport: Custom httpx transport (e.g. httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.backoff = backoff or Backoff(config=BackoffConfig.conservative())
        self.retryable_status_codes = (
            frozenset(retryable_status_codes)
            if retryable_status_codes is not None
            else DEFAULT_RETRYABLE_STATUS_CODES
        )
        self.timeout = timeout
        self.transport = transport

    def should_retry(self, status_code: int) -> bool:
        """Check if the given status code should trigger a retry."""
        return status_code in self.retryable_status_codes

    def _check(self, response: httpx.Response) -> httpx.Response:
        """Raise for error statuses, marking non-retryable ones permanent."""
        if not response.is_error:
            return response
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if self.should_retry(response.status_code):
                raise
            logger.debug(f"Status {response.status_code} for {response.request.url} is not retryable")
            raise permanent(e)
        return response

    def request(
        self,
        method: str,
        url: str,
        cancel: threading.Event | None = None,
        **kwargs,
    ) -> httpx.Response:
        """
        Send a request, retrying per the backoff configuration.

        Args:
            method: HTTP method
            url: Absolute URL or path relative to `base_url`
            cancel: Event that aborts retrying
            **kwargs: Passed to httpx.Client.request

        Returns:
            The first non-error response
        """
        with httpx.Client(
            base_url=self.base_url, timeout=self.timeout, transport=self.transport
        ) as client:

            def send(_cancel: threading.Event | None) -> httpx.Response:
                return self._check(client.request(method, url, **kwargs))

            return self.backoff.execute(send, cancel)

    async def arequest(
        self,
        method: str,
        url: str,
        cancel: asyncio.Event | None = None,
        **kwargs,
    ) -> httpx.Response:
        """Async variant of `request`."""
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self.transport
        ) as client:

            async def send(_cancel: asyncio.Event | None) -> httpx.Response:
                return self._check(await client.request(method, url, **kwargs))

            return await self.backoff.execute_async(send, cancel)

    def get(self, url: str, cancel: threading.Event | None = None, **kwargs) -> httpx.Response:
        return self.request("GET", url, cancel, **kwargs)

    async def aget(
        self, url: str, cancel: asyncio.Event | None = None, **kwargs
    ) -> httpx.Response:
        return await self.arequest("GET", url, cancel, **kwargs)
