"""
Settings and configuration management for the Lodgify MCP server.

Provides environment-based configuration using Pydantic settings for the
API key, endpoint, request pipeline tuning and logging.
"""

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuration settings for the Lodgify MCP server.

    Uses environment variables with LODGIFY_ prefix for configuration.
    All values are read once, when the orchestrator is built.
    """

    # API Configuration
    api_key: str = Field("", description="Lodgify API key sent as X-ApiKey")
    base_url: str = Field(
        "https://api.lodgify.com", description="Base URL for the Lodgify API"
    )
    api_version: Literal["v1", "v2"] = Field(
        "v2", description="Default Lodgify API version"
    )
    read_only: bool = Field(
        False, description="Reject all write operations (POST/PUT/PATCH/DELETE)"
    )
    debug_http: bool = Field(
        False, description="Trace HTTP requests and responses at debug level"
    )

    # Client Configuration
    request_timeout: float = Field(
        30.0, description="HTTP request timeout in seconds", ge=1, le=120
    )
    max_retries: int = Field(
        5, description="Total attempts per request, including the first", ge=1, le=10
    )
    initial_retry_delay_ms: int = Field(
        1000, description="Delay before the first retry in milliseconds", ge=0
    )
    max_retry_delay_ms: int = Field(
        30000, description="Upper bound for a single retry delay", ge=0
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        60, description="Requests allowed per rate-limit window", ge=1
    )
    rate_limit_window_ms: int = Field(
        60000, description="Rate-limit window length in milliseconds", ge=1
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Logging format string",
    )
    enable_structured_logging: bool = Field(
        False, description="Enable structured logging with JSON format"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="LODGIFY_", case_sensitive=False, extra="ignore"
    )

    def get_client_config(self) -> dict[str, Any]:
        """
        Get HTTP client configuration dictionary.

        Returns:
            Dictionary containing client configuration
        """
        return {
            "base_url": self.base_url,
            "api_version": self.api_version,
            "read_only": self.read_only,
            "timeout": self.request_timeout,
            "max_retries": self.max_retries,
            "rate_limit": f"{self.rate_limit_requests}/{self.rate_limit_window_ms}ms",
        }

    def validate_required_settings(self) -> list[str]:
        """
        Validate that all required settings are present.

        Returns:
            List of missing settings (empty if all present)
        """
        missing = []

        if not self.api_key:
            missing.append("LODGIFY_API_KEY")

        if not self.base_url:
            missing.append("LODGIFY_BASE_URL")

        return missing


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
