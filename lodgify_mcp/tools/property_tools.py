"""
Property and availability tools for the Lodgify MCP server.

Provides MCP tools for listing and searching properties, inspecting room
types, checking availability and requesting price quotes.
"""

from typing import Any

from fastmcp import FastMCP

from lodgify_mcp.config.constants import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_PROPERTY_SEARCH_LIMIT,
    MAX_PROPERTY_SEARCH_LIMIT,
)
from lodgify_mcp.utils.client_factory import ensure_write_allowed, get_orchestrator
from lodgify_mcp.utils.validators import (
    validate_date_range,
    validate_date_string,
    validate_guest_count,
    validate_identifier,
    validate_pagination_params,
)


def register_property_tools(app: FastMCP):
    """Register all property and availability MCP tools."""

    @app.tool()
    async def lodgify_list_properties(
        page: int = 1,
        size: int = DEFAULT_PAGE_SIZE,
        include_count: bool = False,
        include_in_out: bool = False,
        updated_since: str | None = None,
        wid: int | None = None,
    ) -> dict[str, Any]:
        """
        List properties with pagination.

        Args:
            page: Page number to retrieve (1-based)
            size: Number of items per page (max 50)
            include_count: Include the total number of results
            include_in_out: Include available check-in/out dates
            updated_since: Only properties updated since this ISO datetime
            wid: Website ID filter

        Returns:
            Dictionary containing the properties page
        """
        validate_pagination_params(page, size)

        params: dict[str, Any] = {
            "page": page,
            "size": size,
            "includeCount": include_count,
            "includeInOut": include_in_out,
            "updatedSince": updated_since,
            "wid": wid,
        }

        result = await get_orchestrator().properties.list_properties(params)
        return {"success": True, **result}

    @app.tool()
    async def lodgify_get_property(property_id: str) -> dict[str, Any]:
        """
        Get full details of a property.

        Args:
            property_id: Property identifier

        Returns:
            Dictionary containing the property
        """
        property_id = validate_identifier(property_id, "Property ID")
        result = await get_orchestrator().properties.get_property(property_id)
        return {"success": True, "property": result}

    @app.tool()
    async def lodgify_list_property_rooms(property_id: str) -> dict[str, Any]:
        """
        List the room types of a property.

        Args:
            property_id: Property identifier

        Returns:
            Dictionary containing the room types
        """
        property_id = validate_identifier(property_id, "Property ID")
        rooms = await get_orchestrator().properties.list_property_rooms(property_id)
        return {
            "success": True,
            "property_id": property_id,
            "rooms": rooms,
            "count": len(rooms),
        }

    @app.tool()
    async def lodgify_find_properties(
        search_term: str | None = None,
        include_bookings: bool = True,
        limit: int = DEFAULT_PROPERTY_SEARCH_LIMIT,
    ) -> dict[str, Any]:
        """
        Find properties by name, also looking at recent bookings.

        Args:
            search_term: Case-insensitive part of the property name
            include_bookings: Also search property references in bookings
            limit: Maximum number of results (1-50)

        Returns:
            Dictionary containing matching properties and a summary message
        """
        limit = min(max(1, limit), MAX_PROPERTY_SEARCH_LIMIT)
        result = await get_orchestrator().properties.find_properties(
            search_term=search_term or None,
            include_bookings=include_bookings,
            limit=limit,
        )
        return {"success": True, **result}

    @app.tool()
    async def lodgify_list_deleted_properties(
        deleted_since: str | None = None,
    ) -> dict[str, Any]:
        """
        List properties that were deleted.

        Args:
            deleted_since: Only properties deleted since this ISO datetime

        Returns:
            Dictionary containing the deleted properties
        """
        params = {"deletedSince": deleted_since} if deleted_since else None
        result = await get_orchestrator().properties.list_deleted_properties(params)
        return {"success": True, **result}

    @app.tool()
    async def lodgify_get_property_availability(
        property_id: str,
        from_date: str | None = None,
        to_date: str | None = None,
        room_type_id: str | None = None,
    ) -> dict[str, Any]:
        """
        Get availability for a property or one of its room types.

        Args:
            property_id: Property identifier
            from_date: Start date in YYYY-MM-DD format
            to_date: End date in YYYY-MM-DD format
            room_type_id: Restrict to a single room type

        Returns:
            Dictionary containing availability periods
        """
        property_id = validate_identifier(property_id, "Property ID")
        from_date = from_date.split("T")[0] if from_date else None
        to_date = to_date.split("T")[0] if to_date else None

        if from_date and to_date:
            validate_date_range(
                from_date, to_date, "from date", "to date", allow_same_day=True
            )
        elif from_date:
            validate_date_string(from_date, "from date")
        elif to_date:
            validate_date_string(to_date, "to date")

        params = {"from": from_date, "to": to_date}
        availability = get_orchestrator().availability
        if room_type_id:
            result = await availability.get_availability_for_room(
                property_id, room_type_id, params
            )
        else:
            result = await availability.get_availability_for_property(
                property_id, params
            )

        return {"success": True, "property_id": property_id, "availability": result}

    @app.tool()
    async def lodgify_get_quote(
        property_id: str,
        room_type_id: str,
        from_date: str,
        to_date: str,
        adults: int = 1,
        children: int = 0,
        infants: int = 0,
        currency: str | None = None,
        include_extras: bool | None = None,
        include_breakdown: bool | None = None,
    ) -> dict[str, Any]:
        """
        Calculate a price quote for a stay.

        Args:
            property_id: Property identifier
            room_type_id: Room type to quote
            from_date: Arrival date in YYYY-MM-DD format
            to_date: Departure date in YYYY-MM-DD format
            adults: Number of adults
            children: Number of children
            infants: Number of infants
            currency: ISO currency code for the quote
            include_extras: Include optional extras
            include_breakdown: Include the price breakdown

        Returns:
            Dictionary containing the quote
        """
        property_id = validate_identifier(property_id, "Property ID")
        validate_date_range(from_date, to_date, "from date", "to date")
        validate_guest_count(adults, children, infants)

        request = {
            "from": from_date,
            "to": to_date,
            "guestBreakdown": {
                "adults": adults,
                "children": children,
                "infants": infants,
            },
            "roomTypes": [{"Id": room_type_id}],
            "currency": currency,
            "includeExtras": include_extras,
            "includeBreakdown": include_breakdown,
        }

        quote = await get_orchestrator().quotes.get_quote(property_id, request)
        return {"success": True, "property_id": property_id, "quote": quote}

    @app.tool()
    async def lodgify_update_property_availability(
        property_id: str,
        from_date: str,
        to_date: str,
        is_available: bool,
        min_stay: int | None = None,
        max_stay: int | None = None,
    ) -> dict[str, Any]:
        """
        Open or block a property for a date range.

        Args:
            property_id: Property identifier
            from_date: Start date in YYYY-MM-DD format
            to_date: End date in YYYY-MM-DD format
            is_available: Whether the dates are bookable
            min_stay: Minimum stay in nights
            max_stay: Maximum stay in nights

        Returns:
            Dictionary containing the update confirmation
        """
        client = ensure_write_allowed(
            "lodgify_update_property_availability", "Update property availability"
        )
        property_id = validate_identifier(property_id, "Property ID")
        validate_date_range(
            from_date, to_date, "from date", "to date", allow_same_day=True
        )

        payload: dict[str, Any] = {
            "from": from_date,
            "to": to_date,
            "isAvailable": is_available,
        }
        if min_stay is not None:
            payload["minStay"] = min_stay
        if max_stay is not None:
            payload["maxStay"] = max_stay

        result = await client.availability.update_property_availability(
            property_id, payload
        )
        return {"success": True, "property_id": property_id, "result": result}
