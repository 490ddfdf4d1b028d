"""
Unit tests for ApiClientOrchestrator.

Covers the request pipeline (read-only guard, rate limit, retry, error
normalization), the module registry and the composite operations.
"""

import logging
from datetime import date
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from lodgify_mcp.clients.api_clients.properties import PropertiesClient
from lodgify_mcp.clients.orchestrator import ApiClientOrchestrator, TransactionStep
from lodgify_mcp.clients.rate_limiter import SlidingWindowRateLimiter
from lodgify_mcp.config.settings import Settings
from lodgify_mcp.utils.exceptions import (
    ConfigurationError,
    PermanentApiError,
    RateLimitExceededError,
    ReadOnlyModeError,
    TransientApiError,
)


class TestOrchestratorConstruction:
    """Test suite for orchestrator configuration."""

    def test_requires_api_key(self):
        with pytest.raises(ConfigurationError):
            ApiClientOrchestrator(api_key="")

    def test_rejects_unknown_version(self):
        with pytest.raises(ConfigurationError):
            ApiClientOrchestrator(api_key="k", default_version="v3")

    def test_from_settings(self):
        settings = Settings(
            api_key="abc",
            base_url="https://example.test",
            read_only=True,
            max_retries=2,
            rate_limit_requests=10,
            rate_limit_window_ms=5000,
        )

        client = ApiClientOrchestrator.from_settings(settings)

        assert client.base_url == "https://example.test"
        assert client.read_only is True
        assert client.default_headers["X-ApiKey"] == "abc"
        assert client.retry_handler.max_retries == 2
        assert client.rate_limiter.limit == 10
        assert client.rate_limiter.window_ms == 5000

    @pytest.mark.parametrize(
        ("path", "version", "expected"),
        [
            ("properties", None, "/v2/properties"),
            ("/properties", None, "/v2/properties"),
            ("v1/reservation/booking", None, "/v2/reservation/booking"),
            ("/v2/properties", "v1", "/v1/properties"),
            ("webhooks/v1/list", "v1", "/v1/webhooks/v1/list"),
        ],
    )
    def test_build_path(self, orchestrator, path, version, expected):
        assert orchestrator.build_path(path, version) == expected


class TestRequestPipeline:
    """Test suite for the guarded, rate-limited, retried request path."""

    @pytest.mark.asyncio
    async def test_successful_request(self, orchestrator, transport):
        transport.responses = [httpx.Response(200, json={"id": 1})]

        result = await orchestrator.request(
            "get", "properties", params={"page": 1, "includeCount": True}
        )

        assert result == {"id": 1}
        sent = transport.last
        assert sent.method == "GET"
        assert sent.url.path == "/v2/properties"
        assert sent.url.params["includeCount"] == "true"
        assert sent.headers["X-ApiKey"] == "test-api-key"
        assert orchestrator.rate_limiter.count == 1

    @pytest.mark.asyncio
    async def test_read_only_blocks_writes_before_anything_else(
        self, make_orchestrator, transport
    ):
        client = make_orchestrator(read_only=True)

        for method in ("POST", "put", "PATCH", "delete"):
            with pytest.raises(ReadOnlyModeError) as exc_info:
                await client.request(method, "reservations/bookings", body={"a": 1})
            assert exc_info.value.status == 403
            assert exc_info.value.detail["method"] == method.upper()

        assert transport.count == 0
        assert client.rate_limiter.count == 0

    @pytest.mark.asyncio
    async def test_read_only_allows_reads(self, make_orchestrator, transport):
        client = make_orchestrator(read_only=True)

        await client.request("GET", "properties")

        assert transport.count == 1

    @pytest.mark.asyncio
    async def test_rate_limit_fails_fast(self, make_orchestrator, transport, clock):
        client = make_orchestrator(
            rate_limiter=SlidingWindowRateLimiter(2, 60_000, clock=clock)
        )
        await client.request("GET", "properties")
        await client.request("GET", "properties")

        with pytest.raises(RateLimitExceededError) as exc_info:
            await client.request("GET", "properties")

        error = exc_info.value
        assert error.status == 429
        assert error.remaining == 0
        assert error.reset_ms == 60_000
        assert error.detail["retryAfter"] == 60
        assert transport.count == 2

    @pytest.mark.asyncio
    async def test_skip_rate_limit(self, make_orchestrator, transport, clock):
        client = make_orchestrator(
            rate_limiter=SlidingWindowRateLimiter(1, 60_000, clock=clock)
        )
        await client.request("GET", "properties")

        await client.request("GET", "properties", skip_rate_limit=True)

        assert transport.count == 2
        assert client.rate_limiter.count == 1

    @pytest.mark.asyncio
    async def test_retries_stop_at_rate_limit(
        self, make_orchestrator, transport, clock, sleeps
    ):
        limiter = SlidingWindowRateLimiter(2, 60_000, clock=clock)
        client = make_orchestrator(rate_limiter=limiter)
        transport.responses = [httpx.Response(503, json={})]

        with pytest.raises(RateLimitExceededError):
            await client.request("GET", "properties")

        assert transport.count == 2
        assert limiter.count == limiter.limit
        assert sleeps.calls == [100, 200]

    @pytest.mark.asyncio
    async def test_unserializable_body_is_not_retried(
        self, orchestrator, transport, sleeps
    ):
        with pytest.raises(TypeError):
            await orchestrator.request(
                "POST", "reservations/bookings", body={"arrival": date(2025, 1, 1)}
            )

        assert transport.count == 0
        assert sleeps.calls == []

    @pytest.mark.asyncio
    async def test_retries_transient_errors_with_backoff(
        self, orchestrator, transport, sleeps
    ):
        transport.responses = [httpx.Response(429, json={"message": "slow down"})] * 4
        transport.responses.append(httpx.Response(200, json={"ok": True}))

        result = await orchestrator.request("GET", "properties")

        assert result == {"ok": True}
        assert transport.count == 5
        assert sleeps.calls == [100, 200, 400, 800]
        assert orchestrator.rate_limiter.count == 5

    @pytest.mark.asyncio
    async def test_retry_after_header_sets_delay(self, orchestrator, transport, sleeps):
        transport.responses = [
            httpx.Response(429, headers={"Retry-After": "5"}, json={}),
            httpx.Response(200, json={}),
        ]

        await orchestrator.request("GET", "properties")

        assert sleeps.calls == [5000]

    @pytest.mark.asyncio
    async def test_permanent_error_is_not_retried(
        self, orchestrator, transport, sleeps
    ):
        transport.responses = [
            httpx.Response(400, json={"message": "bad", "apiKey": "leak"})
        ]

        with pytest.raises(PermanentApiError) as exc_info:
            await orchestrator.request("GET", "properties")

        error = exc_info.value
        assert transport.count == 1
        assert sleeps.calls == []
        assert error.status == 400
        assert error.attempts == 1
        assert error.path == "/v2/properties"
        assert str(error) == "Lodgify 400: Bad Request"
        assert error.detail == {"message": "bad", "apiKey": "[REDACTED]"}

    @pytest.mark.asyncio
    async def test_exhausted_retries_carry_attempt_count(
        self, orchestrator, transport, sleeps
    ):
        transport.responses = [httpx.Response(503, text="down")]

        with pytest.raises(TransientApiError) as exc_info:
            await orchestrator.request("GET", "properties")

        assert exc_info.value.attempts == 5
        assert exc_info.value.status == 503
        assert exc_info.value.detail == "down"
        assert transport.count == 5
        assert len(sleeps.calls) == 4

    @pytest.mark.asyncio
    async def test_network_error_is_transient_status_zero(
        self, orchestrator, transport
    ):
        transport.responses = [
            httpx.ConnectError("connection refused"),
            httpx.Response(200, json={"ok": True}),
        ]

        assert await orchestrator.request("GET", "properties") == {"ok": True}
        assert transport.count == 2

    @pytest.mark.asyncio
    async def test_timeout_is_transient_status_zero(self, make_orchestrator, transport):
        client = make_orchestrator()
        transport.responses = [httpx.ReadTimeout("timed out")]

        with pytest.raises(TransientApiError) as exc_info:
            await client.request("GET", "properties", skip_retry=True)

        assert exc_info.value.status == 0
        assert transport.count == 1

    @pytest.mark.asyncio
    async def test_skip_retry_makes_one_attempt(self, orchestrator, transport, sleeps):
        transport.responses = [httpx.Response(500, json={})]

        with pytest.raises(TransientApiError):
            await orchestrator.request("GET", "properties", skip_retry=True)

        assert transport.count == 1
        assert sleeps.calls == []

    @pytest.mark.asyncio
    async def test_unknown_status_reason(self, orchestrator, transport):
        transport.responses = [httpx.Response(418, json={})]

        with pytest.raises(PermanentApiError) as exc_info:
            await orchestrator.request("GET", "teapot")

        assert exc_info.value.message.startswith("Lodgify 418: HTTP 418")

    @pytest.mark.asyncio
    async def test_error_to_dict(self, orchestrator, transport):
        transport.responses = [httpx.Response(404, json={"code": "missing"})]

        with pytest.raises(PermanentApiError) as exc_info:
            await orchestrator.request("GET", "properties/9")

        assert exc_info.value.to_dict() == {
            "error": True,
            "kind": "permanent",
            "status": 404,
            "message": "Lodgify 404: Not Found",
            "path": "/v2/properties/9",
            "detail": {"code": "missing"},
            "attempts": 1,
        }


class TestModuleRegistry:
    """Test suite for module registration."""

    def test_accessor_memoizes_module(self, orchestrator):
        first = orchestrator.properties
        second = orchestrator.properties

        assert first is second
        assert isinstance(first, PropertiesClient)
        assert orchestrator.has_module("properties")
        assert orchestrator.get_module("properties") is first

    def test_register_module_uses_factory_once(self, orchestrator):
        factory = Mock(return_value=Mock(name="custom"))

        a = orchestrator.register_module("custom", factory)
        b = orchestrator.register_module("custom", factory)

        assert a is b
        factory.assert_called_once_with(orchestrator)

    def test_all_and_clear(self, orchestrator):
        orchestrator.properties
        orchestrator.bookings_v1

        names = {module.name for module in orchestrator.get_all_modules()}
        assert names == {"properties", "bookings-v1"}

        orchestrator.clear_modules()

        assert orchestrator.get_all_modules() == []
        assert not orchestrator.has_module("properties")

    def test_module_versions(self, orchestrator):
        assert orchestrator.webhooks.version == "v1"
        assert orchestrator.rates_v1.version == "v1"
        assert orchestrator.messaging.version == "v2"

    def test_registered_modules_expose_name_and_version(self, orchestrator):
        orchestrator.properties
        orchestrator.bookings_v1

        described = {
            (module.name, module.version)
            for module in orchestrator.get_all_modules()
        }

        assert described == {("properties", "v2"), ("bookings-v1", "v1")}


class TestCompositeOperations:
    """Test suite for batch, transaction and cross-module execution."""

    @pytest.mark.asyncio
    async def test_batch_preserves_order(self, orchestrator, transport):
        transport.responses = [
            lambda request: httpx.Response(200, json={"path": request.url.path})
        ]

        results = await orchestrator.batch(
            [
                {"method": "GET", "path": "properties"},
                {"method": "GET", "path": "rates/settings", "options": {"params": {}}},
            ]
        )

        assert results == [{"path": "/v2/properties"}, {"path": "/v2/rates/settings"}]

    @pytest.mark.asyncio
    async def test_batch_read_only_rejects_everything(
        self, make_orchestrator, transport
    ):
        client = make_orchestrator(read_only=True)

        with pytest.raises(ReadOnlyModeError) as exc_info:
            await client.batch(
                [
                    {"method": "GET", "path": "properties"},
                    {"method": "POST", "path": "reservations/bookings"},
                    {"method": "DELETE", "path": "reservations/bookings/1"},
                ]
            )

        assert transport.count == 0
        assert exc_info.value.detail["method"] == "POST"
        assert exc_info.value.path == "/v2/reservations/bookings"
        assert "2 write operations" in exc_info.value.detail["operation"]

    @pytest.mark.asyncio
    async def test_batch_read_only_uses_operation_version(self, make_orchestrator):
        client = make_orchestrator(read_only=True)

        with pytest.raises(ReadOnlyModeError) as exc_info:
            await client.batch(
                [
                    {
                        "method": "PUT",
                        "path": "rates/savewithoutavailability",
                        "options": {"api_version": "v1"},
                    }
                ]
            )

        assert exc_info.value.path == "/v1/rates/savewithoutavailability"
        assert exc_info.value.detail["endpoint"] == (
            "/v1/rates/savewithoutavailability"
        )

    @pytest.mark.asyncio
    async def test_transaction_rolls_back_executed_steps(self, orchestrator):
        calls: list[str] = []

        async def record(name: str) -> str:
            calls.append(name)
            return name

        async def fail() -> None:
            calls.append("execute-2")
            raise RuntimeError("step 2 failed")

        steps = [
            TransactionStep(
                execute=lambda: record("execute-1"),
                rollback=lambda: record("rollback-1"),
            ),
            TransactionStep(execute=fail, rollback=lambda: record("rollback-2")),
            TransactionStep(
                execute=lambda: record("execute-3"),
                rollback=lambda: record("rollback-3"),
            ),
        ]

        with pytest.raises(RuntimeError, match="step 2 failed"):
            await orchestrator.transaction(steps)

        assert calls == ["execute-1", "execute-2", "rollback-1"]

    @pytest.mark.asyncio
    async def test_transaction_rollback_order_and_failures(
        self, orchestrator, caplog
    ):
        rollbacks: list[int] = []

        def make_rollback(index: int, fails: bool = False):
            async def rollback() -> None:
                rollbacks.append(index)
                if fails:
                    raise RuntimeError(f"rollback {index} failed")

            return rollback

        steps = [
            TransactionStep(execute=AsyncMock(return_value=1), rollback=make_rollback(1)),
            TransactionStep(
                execute=AsyncMock(return_value=2), rollback=make_rollback(2, fails=True)
            ),
            TransactionStep(execute=AsyncMock(side_effect=ValueError("boom"))),
        ]

        with caplog.at_level(logging.ERROR):
            with pytest.raises(ValueError, match="boom"):
                await orchestrator.transaction(steps)

        assert rollbacks == [2, 1]
        assert any("Rollback failed" in r.message for r in caplog.records)

    @pytest.mark.asyncio
    async def test_transaction_returns_results(self, orchestrator):
        steps = [
            TransactionStep(execute=AsyncMock(return_value="a")),
            TransactionStep(execute=AsyncMock(return_value="b")),
        ]

        assert await orchestrator.transaction(steps) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_transaction_read_only_prescan(self, make_orchestrator):
        client = make_orchestrator(read_only=True)
        first = AsyncMock()

        with pytest.raises(ReadOnlyModeError) as exc_info:
            await client.transaction(
                [
                    TransactionStep(execute=first),
                    TransactionStep(
                        execute=AsyncMock(), method="PUT", path="rates/1"
                    ),
                ]
            )

        first.assert_not_called()
        assert exc_info.value.path == "/v2/rates/1"

    @pytest.mark.asyncio
    async def test_execute_across_modules(self, orchestrator):
        orchestrator.properties
        orchestrator.bookings
        orchestrator.rates

        async def describe(module):
            return module.version

        results = await orchestrator.execute_across_modules(
            describe, ["properties", "rates", "unknown"]
        )

        assert results == {"properties": "v2", "rates": "v2"}

    @pytest.mark.asyncio
    async def test_execute_across_modules_fails_fast(self, orchestrator):
        orchestrator.properties
        orchestrator.webhooks

        async def operation(module):
            if module.name == "webhooks":
                raise RuntimeError("webhooks down")
            return "ok"

        with pytest.raises(RuntimeError, match="webhooks down"):
            await orchestrator.execute_across_modules(operation)


class TestHealth:
    """Test suite for health reporting."""

    @pytest.mark.asyncio
    async def test_health_check_per_module(self, orchestrator, transport):
        orchestrator.properties
        orchestrator.webhooks
        transport.responses = [
            lambda request: httpx.Response(
                200 if request.url.path == "/v2/health" else 503, json={}
            )
        ]

        result = await orchestrator.health_check()

        assert result["healthy"] is False
        assert result["modules"]["properties"] == {"healthy": True}
        assert result["modules"]["webhooks"]["healthy"] is False
        assert orchestrator.rate_limiter.count == 0

    @pytest.mark.asyncio
    async def test_health_check_module_without_version(self, orchestrator, transport):
        orchestrator.register_module("custom", lambda client: object())

        result = await orchestrator.health_check()

        assert result == {"healthy": True, "modules": {"custom": {"healthy": True}}}
        assert transport.last.url.path == "/v2/health"

    @pytest.mark.asyncio
    async def test_test_connection(self, orchestrator, transport):
        transport.responses = [httpx.Response(200, json=[{"id": 1}])]

        assert await orchestrator.test_connection() == {"status": "connected"}
        assert transport.last.url.params["limit"] == "1"

    def test_rate_limit_status(self, orchestrator):
        status = orchestrator.get_rate_limit_status()

        assert status["limit"] == 60
        assert status["remaining"] == 60
