"""
Authenticated Lodgify API client and module orchestrator.

Every call made by a domain module goes through ``ApiClientOrchestrator.request``,
which applies, strictly in this order:

1. the read-only guard for write verbs,
2. the retry loop around the transport call, where every attempt first
   checks the local rate limit (fail fast, no waiting) and then takes a slot,
3. normalization of the outcome into parsed data or a ``LodgifyError``.
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from lodgify_mcp.clients.api_clients.availability import AvailabilityClient
from lodgify_mcp.clients.api_clients.bookings import BookingsClient
from lodgify_mcp.clients.api_clients.bookings_v1 import BookingsV1Client
from lodgify_mcp.clients.api_clients.messaging import MessagingClient
from lodgify_mcp.clients.api_clients.properties import PropertiesClient
from lodgify_mcp.clients.api_clients.quotes import QuotesClient
from lodgify_mcp.clients.api_clients.rates import RatesClient
from lodgify_mcp.clients.api_clients.rates_v1 import RatesV1Client
from lodgify_mcp.clients.api_clients.webhooks import WebhooksClient
from lodgify_mcp.clients.base_client import (
    BaseHttpClient,
    HttpResponse,
    sanitize_log_data,
)
from lodgify_mcp.clients.base_module import ApiModule, ModuleFactory, ModuleRegistry
from lodgify_mcp.clients.rate_limiter import (
    SlidingWindowRateLimiter,
    create_lodgify_rate_limiter,
)
from lodgify_mcp.clients.retry import ExponentialBackoffRetry, RetryContext
from lodgify_mcp.utils.exceptions import (
    ApiError,
    ConfigurationError,
    LodgifyError,
    PermanentApiError,
    RateLimitExceededError,
    ReadOnlyModeError,
    TransientApiError,
)

if TYPE_CHECKING:
    from lodgify_mcp.config.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.lodgify.com"
API_VERSIONS = ("v1", "v2")
WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

STATUS_MESSAGES = {
    400: "Bad Request",
    401: "Unauthorized - Check your API key",
    403: "Forbidden",
    404: "Not Found",
    429: "Too Many Requests",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
}

_VERSION_PREFIX = re.compile(r"^/?(v1|v2)/")


@dataclass
class TransactionStep:
    """
    One step of a compensating transaction.

    ``method`` and ``path`` optionally declare the request the step issues,
    which lets a read-only client reject the transaction up front.
    """

    execute: Callable[[], Awaitable[Any]]
    rollback: Callable[[], Awaitable[Any]] | None = None
    method: str | None = None
    path: str = ""


class ApiClientOrchestrator(BaseHttpClient):
    """
    Central coordinator for all Lodgify API operations.

    Owns the rate limiter, the retry policy and the module registry; domain
    modules hold a back-reference to it through their ``ModuleContext``.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        default_version: str = "v2",
        read_only: bool = False,
        timeout: float = 30.0,
        debug_http: bool = False,
        logger: logging.Logger | None = None,
        rate_limiter: SlidingWindowRateLimiter | None = None,
        retry_handler: ExponentialBackoffRetry | None = None,
        session: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            api_key: Lodgify API key sent as ``X-ApiKey``
            base_url: API root override
            default_version: Version used when a call does not name one
            read_only: Reject POST/PUT/PATCH/DELETE before any network cost
            timeout: Transport timeout in seconds
            debug_http: Enable request/response debug tracing
            logger: Logger injection
            rate_limiter: Limiter override (defaults to 60 requests/minute)
            retry_handler: Retry policy override
            session: Pre-built httpx client
        """
        if not api_key:
            raise ConfigurationError("API key is required")
        if default_version not in API_VERSIONS:
            raise ConfigurationError(
                f"Unsupported API version '{default_version}'"
            )

        super().__init__(
            base_url=base_url or DEFAULT_BASE_URL,
            default_headers={
                "X-ApiKey": api_key,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
            debug_http=debug_http,
            logger=logger,
            session=session,
        )

        self.default_version = default_version
        self.read_only = read_only
        self.rate_limiter = rate_limiter or create_lodgify_rate_limiter()
        self.retry_handler = retry_handler or ExponentialBackoffRetry()
        self._registry = ModuleRegistry(self)

        self.logger.info(
            "Lodgify client initialized",
            extra={
                "base_url": self.base_url,
                "default_version": default_version,
                "read_only": read_only,
                "debug_http": debug_http,
            },
        )

    @classmethod
    def from_settings(
        cls, settings: "Settings", **overrides: Any
    ) -> "ApiClientOrchestrator":
        """Build an orchestrator from application settings."""
        config: dict[str, Any] = {
            "api_key": settings.api_key,
            "base_url": settings.base_url,
            "default_version": settings.api_version,
            "read_only": settings.read_only,
            "timeout": settings.request_timeout,
            "debug_http": settings.debug_http,
            "rate_limiter": create_lodgify_rate_limiter(
                limit=settings.rate_limit_requests,
                window_ms=settings.rate_limit_window_ms,
            ),
            "retry_handler": ExponentialBackoffRetry(
                max_retries=settings.max_retries,
                initial_delay_ms=settings.initial_retry_delay_ms,
                max_delay_ms=settings.max_retry_delay_ms,
            ),
        }
        config.update(overrides)
        return cls(**config)

    def build_path(self, path: str, version: str | None = None) -> str:
        """Prefix ``path`` with the API version, replacing any existing one."""
        api_version = version or self.default_version
        clean_path = _VERSION_PREFIX.sub("", path, count=1).lstrip("/")
        return f"/{api_version}/{clean_path}"

    def is_write_method(self, method: str) -> bool:
        return method.upper() in WRITE_METHODS

    def _guard_write(self, method: str, path: str) -> None:
        if self.read_only and self.is_write_method(method):
            verb = method.upper()
            raise ReadOnlyModeError.for_api_operation(verb, path, f"{verb} {path}")

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: Any = None,
        headers: dict[str, str] | None = None,
        api_version: str | None = None,
        skip_retry: bool = False,
        skip_rate_limit: bool = False,
    ) -> Any:
        """
        Make an API request through the full resilience pipeline.

        Args:
            method: HTTP method
            path: Endpoint path, with or without version prefix
            params: Query parameters (nested values use bracket notation)
            body: JSON request body
            headers: Additional headers
            api_version: Version override for this call
            skip_retry: Make exactly one attempt
            skip_rate_limit: Bypass the local limiter entirely

        Returns:
            Parsed response body

        Raises:
            ReadOnlyModeError: Write verb while read-only
            RateLimitExceededError: Local request window exhausted
            TransientApiError: 429/5xx/network failure after retries
            PermanentApiError: Other 4xx responses
            SerializationError: Unparseable successful response
        """
        method = method.upper()
        versioned_path = self.build_path(path, api_version)

        self._guard_write(method, versioned_path)

        async def attempt(context: RetryContext) -> Any:
            if not skip_rate_limit:
                self._check_rate_limit(method, versioned_path)
                self.rate_limiter.record_request()
            if context.attempt > 1:
                self.logger.info(
                    f"Retrying {method} {versioned_path} "
                    f"(attempt {context.attempt}/{context.total_attempts})",
                    extra={"last_error": repr(context.last_error)},
                )
            response = await self._send(
                method, versioned_path, params=params, body=body, headers=headers
            )
            if response.status >= 400:
                raise self._error_from_response(response, versioned_path)
            return response.data

        if skip_retry:
            return await attempt(RetryContext(attempt=1, total_attempts=1))

        result = await self.retry_handler.execute(attempt, self._retry_after_hint)
        if result.success:
            return result.data

        error = result.error
        if isinstance(error, ApiError):
            error.attempts = result.attempts
        self.logger.error(
            f"Request failed after {result.attempts} attempt(s): {error}",
            extra={
                "method": method,
                "path": versioned_path,
                "attempts": result.attempts,
                "error_type": type(error).__name__,
            },
        )
        raise error

    def _check_rate_limit(self, method: str, path: str) -> None:
        """Raise before any slot is consumed when the local window is full."""
        if self.rate_limiter.check_limit():
            return
        remaining = self.rate_limiter.get_remaining()
        reset_ms = self.rate_limiter.get_reset_time()
        self.logger.warning(
            f"Rate limit exceeded for {method} {path}",
            extra={"remaining": remaining, "reset_ms": reset_ms},
        )
        raise RateLimitExceededError(path, remaining, reset_ms)

    async def _send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None,
        body: Any,
        headers: dict[str, str] | None,
    ) -> HttpResponse:
        try:
            return await self.make_request(
                method, path, params=params, body=body, headers=headers
            )
        except httpx.TimeoutException as e:
            raise TransientApiError(
                f"Lodgify 0: Request timed out after {self.timeout}s",
                status=0,
                path=path,
                detail={"error_type": type(e).__name__},
            ) from e
        except httpx.TransportError as e:
            raise TransientApiError(
                f"Lodgify 0: Network error: {e}",
                status=0,
                path=path,
                detail={"error_type": type(e).__name__},
            ) from e

    def _error_from_response(self, response: HttpResponse, path: str) -> ApiError:
        status = response.status
        reason = STATUS_MESSAGES.get(status) or (
            f"HTTP {status} {response.status_text}".strip()
        )
        detail = response.data if response.data not in (None, "") else None
        error_class = (
            TransientApiError if status == 429 or status >= 500 else PermanentApiError
        )
        return error_class(
            f"Lodgify {status}: {reason}",
            status=status,
            path=path,
            detail=sanitize_log_data(detail),
            retry_after=response.headers.get("retry-after"),
        )

    @staticmethod
    def _retry_after_hint(error: BaseException) -> str | None:
        if isinstance(error, ApiError):
            return error.retry_after
        return None

    # Module registry

    def register_module(self, name: str, factory: ModuleFactory) -> Any:
        """Create the module on first use, return the memoized one after."""
        return self._registry.get_or_create(name, factory)

    def get_module(self, name: str) -> ApiModule | None:
        return self._registry.get(name)

    def has_module(self, name: str) -> bool:
        return self._registry.has(name)

    def get_all_modules(self) -> list[ApiModule]:
        return self._registry.all()

    def clear_modules(self) -> None:
        """Drop every registered module (test helper)."""
        self._registry.clear()

    @property
    def properties(self) -> PropertiesClient:
        return self.register_module("properties", PropertiesClient)

    @property
    def bookings(self) -> BookingsClient:
        return self.register_module("bookings", BookingsClient)

    @property
    def availability(self) -> AvailabilityClient:
        return self.register_module("availability", AvailabilityClient)

    @property
    def rates(self) -> RatesClient:
        return self.register_module("rates", RatesClient)

    @property
    def quotes(self) -> QuotesClient:
        return self.register_module("quotes", QuotesClient)

    @property
    def messaging(self) -> MessagingClient:
        return self.register_module("messaging", MessagingClient)

    @property
    def webhooks(self) -> WebhooksClient:
        return self.register_module("webhooks", WebhooksClient)

    @property
    def bookings_v1(self) -> BookingsV1Client:
        return self.register_module("bookings-v1", BookingsV1Client)

    @property
    def rates_v1(self) -> RatesV1Client:
        return self.register_module("rates-v1", RatesV1Client)

    # Composite operations

    async def execute_across_modules(
        self,
        operation: Callable[[Any], Awaitable[Any]],
        module_names: Iterable[str] | None = None,
    ) -> dict[str, Any]:
        """
        Run ``operation`` concurrently on several modules.

        Unknown module names are skipped. The first failure is logged and
        re-raised; no partial result is returned.
        """
        if module_names is None:
            targets = self._registry.items()
        else:
            targets = [
                (name, self._registry.get(name))
                for name in module_names
                if self._registry.has(name)
            ]

        async def run(name: str, module: Any) -> tuple[str, Any]:
            try:
                return name, await operation(module)
            except Exception as e:
                self.logger.error(
                    f"Failed to execute operation on module {name}: {e}",
                    extra={"module_name": name, "error_type": type(e).__name__},
                )
                raise

        pairs = await asyncio.gather(*(run(name, module) for name, module in targets))
        return dict(pairs)

    async def batch(self, operations: list[dict[str, Any]]) -> list[Any]:
        """
        Execute independent requests concurrently.

        Each operation is ``{"method", "path", "options"?}``. In read-only mode
        the whole batch is rejected, naming the first write operation, before
        anything runs. Results keep input order.
        """
        self._reject_writes(
            [
                (
                    op["method"],
                    self.build_path(
                        op["path"], (op.get("options") or {}).get("api_version")
                    ),
                )
                for op in operations
            ],
            "Batch operation",
        )

        return list(
            await asyncio.gather(
                *(
                    self.request(op["method"], op["path"], **(op.get("options") or {}))
                    for op in operations
                )
            )
        )

    async def transaction(self, steps: list[TransactionStep]) -> list[Any]:
        """
        Execute steps sequentially with best-effort compensation.

        When step ``k`` fails, the rollbacks of steps ``1..k-1`` run in reverse
        order. Rollback failures are logged and not raised; the original error
        is re-raised afterwards. Steps that declare a write ``method`` make a
        read-only client reject the whole transaction before step 1 runs;
        undeclared steps are still guarded per request.
        """
        self._reject_writes(
            [
                (step.method, self.build_path(step.path))
                for step in steps
                if step.method
            ],
            "Transaction",
        )

        results: list[Any] = []
        executed: list[TransactionStep] = []

        try:
            for step in steps:
                results.append(await step.execute())
                executed.append(step)
            return results
        except Exception as e:
            self.logger.warning(
                f"Transaction failed, rolling back {len(executed)} operation(s): {e}"
            )
            for step in reversed(executed):
                if step.rollback is None:
                    continue
                try:
                    await step.rollback()
                except Exception as rollback_error:
                    self.logger.error(
                        f"Rollback failed: {rollback_error}",
                        extra={"error_type": type(rollback_error).__name__},
                    )
            raise

    def _reject_writes(self, requests: list[tuple[str, str]], label: str) -> None:
        if not self.read_only:
            return
        writes = [(m, p) for m, p in requests if self.is_write_method(m)]
        if writes:
            method, path = writes[0]
            raise ReadOnlyModeError.for_api_operation(
                method,
                path,
                f"{label} containing {len(writes)} write operations",
            )

    # Health

    def get_rate_limit_status(self) -> dict[str, Any]:
        return self.rate_limiter.get_status()

    async def health_check(self) -> dict[str, Any]:
        """Call ``/{version}/health`` for each registered module."""
        modules: dict[str, dict[str, Any]] = {}

        for name, module in self._registry.items():
            version = getattr(module, "version", None)
            if version not in API_VERSIONS:
                version = None
            try:
                await self.request(
                    "GET",
                    "health",
                    api_version=version,
                    skip_retry=True,
                    skip_rate_limit=True,
                )
                modules[name] = {"healthy": True}
            except LodgifyError as e:
                modules[name] = {"healthy": False, "error": e.message}

        return {
            "healthy": all(status["healthy"] for status in modules.values()),
            "modules": modules,
        }

    async def test_connection(self) -> dict[str, Any]:
        """Verify connectivity with a minimal properties call."""
        await self.properties.list_properties({"limit": 1})
        return {"status": "connected"}
