"""
Rate management tools for the Lodgify MCP server.

Provides MCP tools for viewing the daily rates calendar and rate settings,
and for updating rates through the v1 API.
"""

from typing import Any

from fastmcp import FastMCP

from lodgify_mcp.utils.client_factory import ensure_write_allowed, get_orchestrator
from lodgify_mcp.utils.exceptions import ValidationError
from lodgify_mcp.utils.validators import validate_date_range


def register_rate_tools(app: FastMCP):
    """Register all rate management MCP tools."""

    @app.tool()
    async def lodgify_daily_rates(
        room_type_id: int,
        house_id: int,
        start_date: str,
        end_date: str,
    ) -> dict[str, Any]:
        """
        Get nightly rates for a room type over a date range.

        Args:
            room_type_id: Room type identifier
            house_id: Property identifier
            start_date: Start date in YYYY-MM-DD format
            end_date: End date in YYYY-MM-DD format

        Returns:
            Dictionary containing the daily rates calendar
        """
        validate_date_range(start_date, end_date, allow_same_day=True)

        params = {
            "propertyId": str(house_id),
            "roomTypeId": str(room_type_id),
            "from": start_date,
            "to": end_date,
        }

        rates = await get_orchestrator().rates.get_daily_rates(params)
        return {"success": True, "rates": rates}

    @app.tool()
    async def lodgify_rate_settings(house_id: int | None = None) -> dict[str, Any]:
        """
        Get rate configuration settings.

        Args:
            house_id: Property identifier

        Returns:
            Dictionary containing pricing rules and modifiers
        """
        params = {"propertyId": str(house_id)} if house_id else {}
        settings = await get_orchestrator().rates.get_rate_settings(params)
        return {"success": True, "settings": settings}

    @app.tool()
    async def lodgify_update_rates(
        property_id: int, rates: list[dict[str, Any]]
    ) -> dict[str, Any]:
        """
        Update rates for one or more room types without changing availability.

        Args:
            property_id: Property identifier
            rates: Entries with room_type_id, start_date, end_date,
                price_per_day and optional min_stay and currency

        Returns:
            Dictionary summarizing the update
        """
        client = ensure_write_allowed("lodgify_update_rates", "Update rates")
        if not rates:
            raise ValidationError("At least one rate entry is required")

        return await client.rates_v1.update_rates_v1(
            {"property_id": property_id, "rates": rates}
        )
