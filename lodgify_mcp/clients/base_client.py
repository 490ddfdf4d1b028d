"""
Base HTTP client for the Lodgify API.

Provides URL construction with bracket-notation query flattening, the raw
transport call, response parsing and credential-safe request logging. Retry,
rate limiting and write guarding are layered on top by the orchestrator.
"""

import asyncio
import json
import logging
from typing import Any
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, Field

from lodgify_mcp.utils.exceptions import SerializationError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
REDACTED = "[REDACTED]"
SENSITIVE_KEY_PARTS = ("key", "password", "token", "secret", "auth")


class HttpResponse(BaseModel):
    """Parsed transport response."""

    status: int
    status_text: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    data: Any = None


def flatten_params(params: dict[str, Any], prefix: str = "") -> dict[str, str]:
    """
    Flatten nested parameters into bracket-notation query keys.

    ``{"guest_breakdown": {"adults": 2}}`` becomes
    ``{"guest_breakdown[adults]": "2"}`` and ``{"tags": ["a"]}`` becomes
    ``{"tags[0]": "a"}``. ``None`` leaves are dropped. Keys that already use
    bracket notation are treated as plain leaf keys.
    """
    flattened: dict[str, str] = {}

    for key, value in params.items():
        new_key = f"{prefix}[{key}]" if prefix else str(key)

        if value is None:
            continue

        if isinstance(value, dict):
            flattened.update(flatten_params(value, new_key))
        elif isinstance(value, list | tuple):
            for index, item in enumerate(value):
                item_key = f"{new_key}[{index}]"
                if isinstance(item, dict):
                    flattened.update(flatten_params(item, item_key))
                elif item is not None:
                    flattened[item_key] = _stringify(item)
        else:
            flattened[new_key] = _stringify(value)

    return flattened


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def sanitize_log_data(data: Any) -> Any:
    """Recursively redact values whose key looks like a credential."""
    if isinstance(data, list | tuple):
        return [sanitize_log_data(item) for item in data]

    if not isinstance(data, dict):
        return data

    sanitized = {}
    for key, value in data.items():
        key_lower = str(key).lower()
        if any(part in key_lower for part in SENSITIVE_KEY_PARTS):
            sanitized[key] = REDACTED
        else:
            sanitized[key] = sanitize_log_data(value)
    return sanitized


class BaseHttpClient:
    """
    Transport layer shared by all Lodgify API clients.

    Features:
    - Lazily created, pooled ``httpx.AsyncClient``
    - Bracket-notation query string flattening
    - JSON/text response parsing
    - Debug request/response tracing with credential redaction
    - Async context management for resource cleanup
    """

    def __init__(
        self,
        base_url: str,
        default_headers: dict[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        debug_http: bool = False,
        logger: logging.Logger | None = None,
        session: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize HTTP client.

        Args:
            base_url: API root, without trailing slash
            default_headers: Headers sent with every request
            timeout: Request timeout in seconds
            debug_http: Enable request/response debug tracing
            logger: Logger to write to, defaults to the module logger
            session: Pre-built httpx client (tests inject a mock transport)
        """
        self.base_url = base_url.rstrip("/")
        self.default_headers = dict(default_headers or {})
        self.timeout = timeout
        self.debug_http = debug_http
        self.logger = logger or logging.getLogger(__name__)
        self._session = session
        self._session_lock = asyncio.Lock()

        self._timeout_config = httpx.Timeout(timeout, connect=10.0)
        self._connection_limits = httpx.Limits(
            max_connections=50,
            max_keepalive_connections=20,
            keepalive_expiry=30.0,
        )

    async def __aenter__(self) -> "BaseHttpClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _ensure_session(self) -> httpx.AsyncClient:
        """Ensure HTTP session is initialized."""
        if self._session is None:
            async with self._session_lock:
                if self._session is None:
                    self._session = httpx.AsyncClient(
                        timeout=self._timeout_config,
                        limits=self._connection_limits,
                        follow_redirects=True,
                        headers={"User-Agent": "Lodgify-MCP/0.1 (httpx)"},
                    )
                    self.logger.debug(
                        "HTTP session initialized",
                        extra={
                            "timeout": self.timeout,
                            "max_connections": self._connection_limits.max_connections,
                        },
                    )
        return self._session

    async def close(self) -> None:
        """Close HTTP session and cleanup resources."""
        if self._session:
            try:
                await self._session.aclose()
                self.logger.debug("HTTP session closed successfully")
            finally:
                self._session = None

    def flatten_params(
        self, params: dict[str, Any], prefix: str = ""
    ) -> dict[str, str]:
        return flatten_params(params, prefix)

    def build_url(self, path: str, params: dict[str, Any] | None = None) -> str:
        """Build the full request URL including the encoded query string."""
        url = f"{self.base_url}{path}"

        if params:
            flattened = flatten_params(params)
            if flattened:
                url = f"{url}?{urlencode(flattened)}"

        return url

    def _log(self, level: int, message: str, data: Any = None) -> None:
        extra = {"data": sanitize_log_data(data)} if data is not None else None
        self.logger.log(level, message, extra=extra)

    async def make_request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """
        Issue a single HTTP request.

        Args:
            method: HTTP method
            path: Path appended to the base URL
            params: Query parameters, nested structures allowed
            body: JSON-serializable request body
            headers: Per-call headers merged over the defaults

        Returns:
            HttpResponse with parsed body

        Raises:
            httpx.TransportError: On network failure or timeout
            SerializationError: If a successful JSON response cannot be parsed
        """
        session = await self._ensure_session()
        url = self.build_url(path, params)
        request_headers = {**self.default_headers, **(headers or {})}

        if self.debug_http:
            self._log(
                logging.DEBUG,
                f"HTTP Request: {method} {path}",
                {"headers": request_headers, "body": body, "params": params},
            )

        response = await session.request(
            method,
            url,
            headers=request_headers,
            content=json.dumps(body) if body is not None else None,
            timeout=self._timeout_config,
        )

        if self.debug_http:
            self._log(
                logging.DEBUG,
                f"HTTP Response: {response.status_code} {response.reason_phrase}",
                {"headers": dict(response.headers)},
            )

        return HttpResponse(
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=dict(response.headers),
            data=self._parse_body(response, path),
        )

    def _parse_body(self, response: httpx.Response, path: str) -> Any:
        content_type = response.headers.get("content-type", "")

        if "application/json" not in content_type:
            return response.text

        if not response.content:
            return None

        try:
            return response.json()
        except json.JSONDecodeError as e:
            if response.is_success:
                raise SerializationError(
                    f"Lodgify {response.status_code}: "
                    f"Response body is not valid JSON: {e}",
                    status=response.status_code,
                    path=path,
                    detail={"raw_content": response.text[:500]},
                ) from e
            # Error bodies fall back to raw text so the error path can report them
            return response.text
