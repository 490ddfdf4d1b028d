"""
Health check resources for the Lodgify MCP server.

Provides MCP resources for monitoring the server, its configuration and the
local request budget of the Lodgify client.
"""

import logging
import time
from typing import Any

from fastmcp import FastMCP

from lodgify_mcp.config.settings import get_settings
from lodgify_mcp.utils import client_factory
from lodgify_mcp.utils.exceptions import LodgifyError

logger = logging.getLogger(__name__)


def build_health_status(version: str) -> dict[str, Any]:
    """
    Collect server health information.

    Returns:
        Dictionary containing health status and detailed checks
    """
    current_settings = get_settings()
    checks: dict[str, Any] = {
        "mcp_server": True,
        "configuration": not current_settings.validate_required_settings(),
        "read_only": current_settings.read_only,
        "version": version,
    }

    try:
        client = client_factory.get_orchestrator()
        checks["client"] = {
            "status": "initialized",
            "modules": [module.name for module in client.get_all_modules()],
            "rate_limit": client.get_rate_limit_status(),
        }
    except LodgifyError as e:
        logger.warning(f"Lodgify client unavailable: {e}")
        checks["client"] = {"status": "error", "error": e.message}

    healthy = checks["configuration"] and checks["client"]["status"] != "error"

    return {
        "status": "healthy" if healthy else "unhealthy",
        "checks": checks,
        "timestamp": time.time(),
    }


def register_health_resources(app: FastMCP):
    """
    Register all health check resources with the FastMCP app.

    Args:
        app: FastMCP application instance
    """
    version = getattr(app, "version", None) or "unknown"

    @app.resource("health://status")
    async def health_status() -> dict[str, Any]:
        """Detailed health status including the rate-limit budget."""
        return build_health_status(version)

    @app.resource("health://ready")
    async def readiness_check() -> dict[str, Any]:
        """Whether the server is ready to serve Lodgify requests."""
        missing = get_settings().validate_required_settings()
        if missing:
            return {
                "status": "not_ready",
                "reason": f"Missing required configuration: {', '.join(missing)}",
            }

        client = client_factory.get_orchestrator()
        rate_limit = client.get_rate_limit_status()
        if not rate_limit["allowed"]:
            return {
                "status": "not_ready",
                "reason": "Local rate limit exhausted",
                "reset_time_ms": rate_limit["reset_time_ms"],
            }

        return {
            "status": "ready",
            "details": {"rate_limit": rate_limit, "version": version},
        }

    @app.resource("health://live")
    async def liveness_check() -> dict[str, Any]:
        """Liveness check."""
        return {"status": "alive", "timestamp": time.time(), "version": version}

    logger.info("Health check resources registered")
