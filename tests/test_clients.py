"""Tests for HTTP client - behavior focused with transport mocking."""

import asyncio
import threading

import httpx
import pytest

from retry_backoff.clients import HTTPRetryClient
from retry_backoff.exceptions import BackoffCancelled, MaxRetriesExceeded
from retry_backoff.retry import Backoff, interval, max_retries, randomization_factor


# --- Helper to build a scripted transport ---


class Script:
    """Transport handler returning scripted statuses, counting calls."""

    def __init__(self, *statuses: int | Exception):
        self.statuses = list(statuses)
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        status = self.statuses[min(self.calls, len(self.statuses) - 1)]
        self.calls += 1
        if isinstance(status, Exception):
            raise status
        return httpx.Response(status, json={"call": self.calls})


def make_client(script: Script, retries: int = 3) -> HTTPRetryClient:
    """Create client with tiny waits for predictable tests."""
    return HTTPRetryClient(
        base_url="http://test",
        backoff=Backoff(interval(0.001), randomization_factor(0), max_retries(retries)),
        transport=httpx.MockTransport(script),
    )


class TestHTTPRetry:
    """Test sync request retry behavior."""

    def test_returns_response_on_success(self):
        script = Script(200)

        response = make_client(script).get("/items")

        assert response.status_code == 200
        assert script.calls == 1

    def test_retries_on_service_unavailable(self):
        """Given 503 then 200, eventually succeeds."""
        script = Script(503, 200)

        response = make_client(script).get("/items")

        assert response.json() == {"call": 2}
        assert script.calls == 2

    def test_does_not_retry_not_found(self):
        """Given 404, raises the plain status error after one call."""
        script = Script(404)

        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            make_client(script).get("/missing")

        assert exc_info.value.response.status_code == 404
        assert script.calls == 1

    def test_retries_connection_errors(self):
        script = Script(httpx.ConnectError("refused"), 200)

        assert make_client(script).request("POST", "/items", json={}).status_code == 200
        assert script.calls == 2

    def test_gives_up_after_max_retries(self):
        script = Script(429)

        with pytest.raises(MaxRetriesExceeded) as exc_info:
            make_client(script, retries=3).get("/items")

        assert script.calls == 3
        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)

    def test_cancelled_before_request(self):
        script = Script(200)
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(BackoffCancelled):
            make_client(script).get("/items", cancel)

        assert script.calls == 0

    def test_should_retry_uses_configured_codes(self):
        client = HTTPRetryClient(retryable_status_codes={418})

        assert client.should_retry(418) is True
        assert client.should_retry(503) is False


class TestAsyncHTTPRetry:
    """Test async request retry behavior."""

    @pytest.mark.asyncio
    async def test_retries_on_server_error(self):
        script = Script(500, 502, 200)

        response = await make_client(script).aget("/items")

        assert response.status_code == 200
        assert script.calls == 3

    @pytest.mark.asyncio
    async def test_does_not_retry_bad_request(self):
        script = Script(400)

        with pytest.raises(httpx.HTTPStatusError):
            await make_client(script).arequest("POST", "/items", json={})

        assert script.calls == 1

    @pytest.mark.asyncio
    async def test_cancelled_before_request(self):
        script = Script(200)
        cancel = asyncio.Event()
        cancel.set()

        with pytest.raises(BackoffCancelled):
            await make_client(script).aget("/items", cancel)

        assert script.calls == 0
