"""
Exception hierarchy for the Lodgify MCP server.

Every error raised by the request pipeline or a domain module is a
``LodgifyError`` carrying a ``kind`` tag together with the status, message,
path and optional detail payload that callers and the MCP layer surface.
"""

from typing import Any

READ_ONLY_SUGGESTION = (
    "Set LODGIFY_READ_ONLY=0 or remove the environment variable "
    "to enable write operations"
)


class LodgifyError(Exception):
    """Base exception for all Lodgify client errors."""

    kind = "error"

    def __init__(
        self,
        message: str,
        status: int = 0,
        path: str = "",
        detail: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.path = path
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        """Structured representation used at the protocol boundary."""
        payload: dict[str, Any] = {
            "error": True,
            "kind": self.kind,
            "status": self.status,
            "message": self.message,
            "path": self.path,
        }
        if self.detail is not None:
            payload["detail"] = self.detail
        return payload

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(status={self.status}, path={self.path!r}, "
            f"message={self.message!r})"
        )


class ConfigurationError(LodgifyError):
    """Missing or invalid configuration."""

    kind = "configuration"


class ValidationError(LodgifyError):
    """Input rejected locally before any network call."""

    kind = "validation"

    def __init__(self, message: str, path: str = "", detail: Any = None) -> None:
        super().__init__(message, status=400, path=path, detail=detail)


class ReadOnlyModeError(LodgifyError):
    """Write operation attempted while the client is in read-only mode."""

    kind = "read_only"

    def __init__(
        self,
        operation: str,
        path: str,
        method: str | None = None,
        endpoint: str | None = None,
        tool_name: str | None = None,
    ) -> None:
        detail: dict[str, Any] = {
            "operation": operation,
            "readOnlyMode": True,
            "suggestion": READ_ONLY_SUGGESTION,
        }
        if method:
            detail["method"] = method
        if endpoint:
            detail["endpoint"] = endpoint
        if tool_name:
            detail["toolName"] = tool_name

        super().__init__(
            f"Write operation '{operation}' is not allowed in read-only mode. "
            "Set LODGIFY_READ_ONLY=0 to enable write operations.",
            status=403,
            path=path,
            detail=detail,
        )
        self.operation = operation
        self.method = method

    @classmethod
    def for_api_operation(
        cls, method: str, endpoint: str, operation: str
    ) -> "ReadOnlyModeError":
        return cls(
            operation, endpoint, method=method.upper(), endpoint=endpoint
        )

    @classmethod
    def for_mcp_tool(cls, tool_name: str, operation: str) -> "ReadOnlyModeError":
        return cls(operation, f"mcp:{tool_name}", method="TOOL", tool_name=tool_name)


class RateLimitExceededError(LodgifyError):
    """Local throttling decision: the request window is exhausted."""

    kind = "rate_limit_exceeded"

    def __init__(self, path: str, remaining: int, reset_ms: int) -> None:
        retry_after = max(1, -(-reset_ms // 1000))
        super().__init__(
            "Lodgify 429: Local rate limit exceeded, "
            f"window resets in {reset_ms}ms",
            status=429,
            path=path,
            detail={
                "remaining": remaining,
                "resetMs": reset_ms,
                "retryAfter": retry_after,
            },
        )
        self.remaining = remaining
        self.reset_ms = reset_ms


class ApiError(LodgifyError):
    """Error response or transport failure from the Lodgify API."""

    kind = "api_error"

    def __init__(
        self,
        message: str,
        status: int = 0,
        path: str = "",
        detail: Any = None,
        retry_after: str | None = None,
        attempts: int = 1,
    ) -> None:
        super().__init__(message, status=status, path=path, detail=detail)
        self.retry_after = retry_after
        self.attempts = attempts

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["attempts"] = self.attempts
        return payload


class TransientApiError(ApiError):
    """429, 5xx or network failure; eligible for retry."""

    kind = "transient"


class PermanentApiError(ApiError):
    """4xx other than 429; never retried."""

    kind = "permanent"


class SerializationError(LodgifyError):
    """Response body could not be parsed as its declared content type."""

    kind = "serialization"
