"""Shared fixtures for the Lodgify MCP test suite."""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from lodgify_mcp.clients.orchestrator import ApiClientOrchestrator
from lodgify_mcp.clients.rate_limiter import SlidingWindowRateLimiter
from lodgify_mcp.clients.retry import ExponentialBackoffRetry

BASE_URL = "https://api.test.lodgify.com"


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class SleepRecorder:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay_ms: float) -> None:
        self.calls.append(delay_ms)


class RecordingTransport:
    """
    Mock transport that records requests and replays scripted responses.

    ``responses`` items are either ``httpx.Response`` objects, exceptions to
    raise, or callables receiving the request. The last item repeats once the
    script is exhausted.
    """

    def __init__(self, responses: list[Any] | None = None) -> None:
        self.responses = list(responses or [httpx.Response(200, json={})])
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        index = min(len(self.requests), len(self.responses) - 1)
        self.requests.append(request)
        response = self.responses[index]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(request)
        # Fresh copy so scripted responses can be replayed
        return httpx.Response(
            response.status_code, headers=response.headers, content=response.content
        )

    @property
    def count(self) -> int:
        return len(self.requests)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def make_orchestrator(
    clock: FakeClock, sleeps: SleepRecorder, transport: RecordingTransport
) -> Callable[..., ApiClientOrchestrator]:
    """Factory building an orchestrator wired to the mock transport."""

    def factory(**overrides: Any) -> ApiClientOrchestrator:
        config: dict[str, Any] = {
            "api_key": "test-api-key",
            "base_url": BASE_URL,
            "rate_limiter": SlidingWindowRateLimiter(60, 60_000, clock=clock),
            "retry_handler": ExponentialBackoffRetry(
                max_retries=5, initial_delay_ms=100, sleep=sleeps
            ),
            "session": httpx.AsyncClient(
                transport=httpx.MockTransport(transport.handler)
            ),
        }
        config.update(overrides)
        return ApiClientOrchestrator(**config)

    return factory


@pytest.fixture
def orchestrator(make_orchestrator) -> ApiClientOrchestrator:
    return make_orchestrator()
