"""
Client factory for the Lodgify MCP tools.

Holds the process-wide ``ApiClientOrchestrator`` so every tool shares one
rate limiter, one retry policy and one HTTP connection pool.
"""

import logging

from lodgify_mcp.clients.orchestrator import ApiClientOrchestrator
from lodgify_mcp.config.settings import Settings, get_settings
from lodgify_mcp.utils.exceptions import ConfigurationError, ReadOnlyModeError

logger = logging.getLogger(__name__)

_orchestrator: ApiClientOrchestrator | None = None


def get_orchestrator(settings: Settings | None = None) -> ApiClientOrchestrator:
    """
    Get the shared orchestrator, creating it from settings on first use.

    Args:
        settings: Settings override, defaults to the global settings

    Returns:
        Shared ApiClientOrchestrator instance

    Raises:
        ConfigurationError: If the API key is not configured
    """
    global _orchestrator
    if _orchestrator is None:
        current_settings = settings or get_settings()
        if not current_settings.api_key:
            raise ConfigurationError("LODGIFY_API_KEY is not configured")
        _orchestrator = ApiClientOrchestrator.from_settings(current_settings)
        logger.info("Lodgify orchestrator created")
    return _orchestrator


def set_orchestrator(orchestrator: ApiClientOrchestrator | None) -> None:
    """Install a pre-built orchestrator (used by tests)."""
    global _orchestrator
    _orchestrator = orchestrator


def reset_orchestrator() -> None:
    """Forget the shared orchestrator; the next call builds a new one."""
    global _orchestrator
    _orchestrator = None


async def close_orchestrator() -> None:
    """Close the shared orchestrator's HTTP session and forget it."""
    global _orchestrator
    if _orchestrator is not None:
        try:
            await _orchestrator.close()
        finally:
            _orchestrator = None


def ensure_write_allowed(tool_name: str, operation: str) -> ApiClientOrchestrator:
    """
    Return the orchestrator if write tools are allowed to run.

    Raises:
        ReadOnlyModeError: If the client is in read-only mode
    """
    client = get_orchestrator()
    if client.read_only:
        raise ReadOnlyModeError.for_mcp_tool(tool_name, operation)
    return client
