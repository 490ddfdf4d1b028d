"""
Booking management tools for the Lodgify MCP server.

Provides MCP tools for reservation search, lifecycle operations, payment
links and access key codes. Create, update and delete go through the v1
bookings API.
"""

from typing import Any

from fastmcp import FastMCP

from lodgify_mcp.config.constants import (
    BOOKING_STATUSES,
    DEFAULT_PAGE_SIZE,
    DEFAULT_STAY_FILTER,
    STAY_FILTERS,
)
from lodgify_mcp.utils.client_factory import ensure_write_allowed, get_orchestrator
from lodgify_mcp.utils.exceptions import ValidationError
from lodgify_mcp.utils.validators import (
    validate_date_range,
    validate_guest_count,
    validate_identifier,
    validate_pagination_params,
    validate_required_fields,
)


def register_booking_tools(app: FastMCP):
    """Register all booking management MCP tools."""

    @app.tool()
    async def lodgify_list_bookings(
        page: int = 1,
        size: int = DEFAULT_PAGE_SIZE,
        include_count: bool = False,
        stay_filter: str = DEFAULT_STAY_FILTER,
        stay_filter_date: str | None = None,
        updated_since: str | None = None,
        include_transactions: bool = False,
        include_external: bool = False,
        include_quote_details: bool = False,
    ) -> dict[str, Any]:
        """
        List bookings with filtering and pagination.

        Args:
            page: Page number to retrieve (1-based)
            size: Number of items per page (max 50)
            include_count: Include the total number of results
            stay_filter: Upcoming, Current, Historic, All, ArrivalDate or DepartureDate
            stay_filter_date: Date used with ArrivalDate/DepartureDate filters
            updated_since: Only bookings updated since this ISO datetime
            include_transactions: Include transactions and payment schedule
            include_external: Include external bookings
            include_quote_details: Include quote details

        Returns:
            Dictionary containing the bookings page
        """
        validate_pagination_params(page, size)
        if stay_filter not in STAY_FILTERS:
            raise ValidationError(
                f"Invalid stay filter. Must be one of: {', '.join(STAY_FILTERS)}"
            )

        params: dict[str, Any] = {
            "limit": size,
            "offset": (page - 1) * size,
            "includeCount": include_count,
            "stayFilter": stay_filter,
            "stayFilterDate": stay_filter_date,
            "updatedSince": updated_since,
            "includeTransactions": include_transactions,
            "includeExternal": include_external,
            "includeQuoteDetails": include_quote_details,
        }

        result = await get_orchestrator().bookings.list_bookings(params)
        return {"success": True, **result}

    @app.tool()
    async def lodgify_get_booking(booking_id: str) -> dict[str, Any]:
        """
        Get full details of a booking.

        Args:
            booking_id: Booking identifier

        Returns:
            Dictionary containing the booking
        """
        booking_id = validate_identifier(booking_id, "Booking ID")
        booking = await get_orchestrator().bookings.get_booking(booking_id)
        return {"success": True, "booking": booking}

    @app.tool()
    async def lodgify_get_upcoming_bookings(
        property_id: str | None = None, limit: int = 10
    ) -> dict[str, Any]:
        """
        List confirmed bookings checking in from today onwards.

        Args:
            property_id: Restrict to one property
            limit: Maximum number of bookings

        Returns:
            Dictionary containing the upcoming bookings
        """
        result = await get_orchestrator().bookings.get_upcoming_bookings(
            property_id=property_id, limit=limit
        )
        return {"success": True, **result}

    @app.tool()
    async def lodgify_get_booking_payment_link(booking_id: str) -> dict[str, Any]:
        """Get the existing payment link of a booking."""
        booking_id = validate_identifier(booking_id, "Booking ID")
        link = await get_orchestrator().bookings.get_booking_payment_link(booking_id)
        return {"success": True, "booking_id": booking_id, "payment_link": link}

    @app.tool()
    async def lodgify_create_booking_payment_link(
        booking_id: str,
        amount: float,
        currency: str,
        description: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a payment link for a booking.

        Args:
            booking_id: Booking identifier
            amount: Amount to collect
            currency: ISO currency code
            description: Optional description shown to the guest

        Returns:
            Dictionary containing the created payment link
        """
        client = ensure_write_allowed(
            "lodgify_create_booking_payment_link", "Create booking payment link"
        )
        booking_id = validate_identifier(booking_id, "Booking ID")

        payment_request: dict[str, Any] = {"amount": amount, "currency": currency}
        if description:
            payment_request["description"] = description

        link = await client.bookings.create_booking_payment_link(
            booking_id, payment_request
        )
        return {"success": True, "booking_id": booking_id, "payment_link": link}

    @app.tool()
    async def lodgify_update_key_codes(
        booking_id: str, key_codes: list[str]
    ) -> dict[str, Any]:
        """
        Replace the access key codes of a booking.

        Args:
            booking_id: Booking identifier
            key_codes: Key codes for the stay

        Returns:
            Dictionary containing the update confirmation
        """
        client = ensure_write_allowed("lodgify_update_key_codes", "Update key codes")
        booking_id = validate_identifier(booking_id, "Booking ID")
        result = await client.bookings.update_key_codes(
            booking_id, {"keyCodes": key_codes}
        )
        return {"success": True, "booking_id": booking_id, "result": result}

    @app.tool()
    async def lodgify_checkin_booking(
        booking_id: str, time: str | None = None
    ) -> dict[str, Any]:
        """
        Mark a booking as checked in.

        Args:
            booking_id: Booking identifier
            time: Check-in time as ISO datetime, defaults to now on the server

        Returns:
            Dictionary containing the check-in confirmation
        """
        client = ensure_write_allowed("lodgify_checkin_booking", "Check in booking")
        booking_id = validate_identifier(booking_id, "Booking ID")
        result = await client.bookings.checkin_booking(booking_id, time)
        return {"success": True, "booking_id": booking_id, "result": result}

    @app.tool()
    async def lodgify_checkout_booking(
        booking_id: str, time: str | None = None
    ) -> dict[str, Any]:
        """
        Mark a booking as checked out.

        Args:
            booking_id: Booking identifier
            time: Check-out time as ISO datetime, defaults to now on the server

        Returns:
            Dictionary containing the check-out confirmation
        """
        client = ensure_write_allowed("lodgify_checkout_booking", "Check out booking")
        booking_id = validate_identifier(booking_id, "Booking ID")
        result = await client.bookings.checkout_booking(booking_id, time)
        return {"success": True, "booking_id": booking_id, "result": result}

    @app.tool()
    async def lodgify_get_external_bookings(booking_id: str) -> dict[str, Any]:
        """Get the external (channel) bookings linked to a booking."""
        booking_id = validate_identifier(booking_id, "Booking ID")
        result = await get_orchestrator().bookings.get_external_bookings(booking_id)
        return {"success": True, "booking_id": booking_id, "external_bookings": result}

    @app.tool()
    async def lodgify_create_booking(
        property_id: int,
        room_type_id: int,
        arrival: str,
        departure: str,
        guest_name: str,
        adults: int,
        children: int = 0,
        infants: int = 0,
        guest_email: str | None = None,
        guest_phone: str | None = None,
        status: str = "booked",
        source: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a booking.

        Args:
            property_id: Property identifier
            room_type_id: Room type identifier
            arrival: Arrival date in YYYY-MM-DD format
            departure: Departure date in YYYY-MM-DD format
            guest_name: Full guest name
            adults: Number of adults
            children: Number of children
            infants: Number of infants
            guest_email: Guest email address
            guest_phone: Guest phone number
            status: booked, tentative, declined, confirmed or open
            source: Booking source description

        Returns:
            Dictionary containing the created booking
        """
        client = ensure_write_allowed("lodgify_create_booking", "Create booking")

        if status not in BOOKING_STATUSES:
            raise ValidationError(
                f"Invalid status. Must be one of: {', '.join(BOOKING_STATUSES)}"
            )
        validate_date_range(arrival, departure, "arrival date", "departure date")
        validate_guest_count(adults, children, infants)

        booking = {
            "property_id": property_id,
            "room_type_id": room_type_id,
            "arrival": arrival,
            "departure": departure,
            "guest_name": guest_name,
            "adults": adults,
            "children": children,
            "infants": infants,
            "guest_email": guest_email,
            "guest_phone": guest_phone,
            "status": status,
            "source": source,
        }
        validate_required_fields(
            booking, ["property_id", "room_type_id", "guest_name", "adults"]
        )

        result = await client.bookings_v1.create_booking_v1(booking)
        return {"success": True, "booking": result}

    @app.tool()
    async def lodgify_update_booking(
        booking_id: str,
        arrival: str | None = None,
        departure: str | None = None,
        guest_name: str | None = None,
        guest_email: str | None = None,
        guest_phone: str | None = None,
        room_type_id: int | None = None,
        adults: int | None = None,
        children: int | None = None,
        infants: int | None = None,
        status: str | None = None,
        source: str | None = None,
    ) -> dict[str, Any]:
        """
        Update fields of an existing booking.

        Only the fields that are given are sent.

        Returns:
            Dictionary containing the updated booking
        """
        client = ensure_write_allowed("lodgify_update_booking", "Update booking")
        booking_id = validate_identifier(booking_id, "Booking ID")

        if status is not None and status not in BOOKING_STATUSES:
            raise ValidationError(
                f"Invalid status. Must be one of: {', '.join(BOOKING_STATUSES)}"
            )
        if arrival and departure:
            validate_date_range(arrival, departure, "arrival date", "departure date")

        candidates = {
            "arrival": arrival,
            "departure": departure,
            "guest_name": guest_name,
            "guest_email": guest_email,
            "guest_phone": guest_phone,
            "room_type_id": room_type_id,
            "adults": adults,
            "children": children,
            "infants": infants,
            "status": status,
            "source": source,
        }
        updates = {key: value for key, value in candidates.items() if value is not None}
        if not updates:
            raise ValidationError("At least one field to update is required")

        result = await client.bookings_v1.update_booking_v1(booking_id, updates)
        return {"success": True, "booking_id": booking_id, "booking": result}

    @app.tool()
    async def lodgify_delete_booking(booking_id: str) -> dict[str, Any]:
        """
        Permanently delete a booking.

        Args:
            booking_id: Booking identifier

        Returns:
            Dictionary containing the deletion confirmation
        """
        client = ensure_write_allowed("lodgify_delete_booking", "Delete booking")
        booking_id = validate_identifier(booking_id, "Booking ID")
        result = await client.bookings_v1.delete_booking_v1(booking_id)
        return {
            "success": True,
            "booking_id": booking_id,
            "message": f"Booking {booking_id} deleted",
            "result": result,
        }
