"""
Main entry point for the Lodgify MCP server.

This module sets up the FastMCP server with all tools and resources for
interfacing with the Lodgify vacation rental API.
"""

import asyncio
import json
import logging
import sys
from typing import Any

from fastmcp import FastMCP

from lodgify_mcp import __version__
from lodgify_mcp.config.settings import Settings, get_settings
from lodgify_mcp.resources.health_check import register_health_resources
from lodgify_mcp.tools.booking_tools import register_booking_tools
from lodgify_mcp.tools.messaging_tools import register_messaging_tools
from lodgify_mcp.tools.property_tools import register_property_tools
from lodgify_mcp.tools.rate_tools import register_rate_tools
from lodgify_mcp.tools.webhook_tools import register_webhook_tools
from lodgify_mcp.utils.client_factory import close_orchestrator, get_orchestrator
from lodgify_mcp.utils.exceptions import ConfigurationError, LodgifyError

# Attributes every LogRecord has; anything else was passed through ``extra``
_RESERVED_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Render log records, including ``extra`` fields, as one JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS:
                log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(settings: Settings) -> None:
    """Setup logging configuration."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.enable_structured_logging:
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        logging.root.handlers = [handler]
    else:
        logging.basicConfig(level=level, format=settings.log_format)

    logging.getLogger().setLevel(level)


logger = logging.getLogger(__name__)

# Initialize FastMCP app
app = FastMCP(
    name="lodgify-mcp",
    version=__version__,
)


@app.tool()
async def health_check() -> dict[str, Any]:
    """
    Check configuration and connectivity to the Lodgify API.

    Returns:
        Dictionary containing health status, per-module checks and the local
        rate-limit budget
    """
    current_settings = get_settings()
    checks: dict[str, Any] = {
        "mcp_server": True,
        "configuration": not current_settings.validate_required_settings(),
        "version": __version__,
    }

    try:
        client = get_orchestrator()
        checks["connection"] = await client.test_connection()
        checks["modules"] = await client.health_check()
        checks["rate_limit"] = client.get_rate_limit_status()
    except LodgifyError as e:
        logger.warning(f"Lodgify health check failed: {e}")
        checks["connection"] = {"status": "error", **e.to_dict()}

    healthy = (
        checks["configuration"]
        and checks["connection"].get("status") == "connected"
    )

    return {
        "status": "healthy" if healthy else "unhealthy",
        "checks": checks,
        "timestamp": asyncio.get_running_loop().time(),
    }


@app.tool()
async def get_server_info() -> dict[str, Any]:
    """
    Get server information and configuration details.

    Returns:
        Dictionary containing server information
    """
    current_settings = get_settings()
    return {
        "name": app.name,
        "version": __version__,
        "description": "MCP server for the Lodgify vacation rental API",
        "lodgify_base_url": current_settings.base_url,
        "lodgify_api_version": current_settings.api_version,
        "read_only": current_settings.read_only,
    }


async def initialize_server() -> None:
    """Initialize server components."""
    current_settings = get_settings()
    logger.info("Initializing Lodgify MCP server...")
    logger.info(f"Version: {__version__}")

    missing_settings = current_settings.validate_required_settings()
    if missing_settings:
        error_msg = (
            f"Missing required environment variables: {', '.join(missing_settings)}"
        )
        logger.error(error_msg)
        raise ConfigurationError(error_msg)

    logger.info(
        "Configuration validated successfully",
        extra=current_settings.get_client_config(),
    )
    if current_settings.read_only:
        logger.info("Read-only mode enabled: write operations are disabled")

    get_orchestrator(current_settings)

    logger.info("Registering MCP tools...")
    register_property_tools(app)
    register_booking_tools(app)
    register_rate_tools(app)
    register_messaging_tools(app)
    register_webhook_tools(app)
    register_health_resources(app)

    logger.info("Server initialization completed successfully")


async def main() -> None:
    """Main entry point for the MCP server."""
    try:
        setup_logging(get_settings())

        await initialize_server()

        logger.info("Starting FastMCP server...")
        await app.run_async()

    except KeyboardInterrupt:
        logger.info("Server shutdown requested")

    except ConfigurationError as e:
        logger.error(f"Server startup failed: {e}")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Unexpected server error: {e}", exc_info=True)
        sys.exit(1)

    finally:
        await close_orchestrator()
        logger.info("Server shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())
