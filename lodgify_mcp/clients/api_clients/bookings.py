"""
Bookings API client for Lodgify.

Handles reservation listing and lifecycle operations (create, update,
cancel, check-in/out), payment links and key codes.
"""

import logging
from datetime import date
from typing import TYPE_CHECKING, Any

from lodgify_mcp.clients.base_module import DomainModule, ModuleContext, encode_id
from lodgify_mcp.models.common import normalize_list_response
from lodgify_mcp.utils.exceptions import ApiError, ValidationError

if TYPE_CHECKING:
    from lodgify_mcp.clients.orchestrator import ApiClientOrchestrator

logger = logging.getLogger(__name__)

UPCOMING_STATUSES = ["confirmed", "booked"]


class BookingsClient(DomainModule):
    """
    Client for the v2 reservation endpoints.

    Every operation that addresses a single booking validates the booking
    ID locally and raises ``ValidationError`` before any request is made.
    """

    def __init__(self, client: "ApiClientOrchestrator") -> None:
        super().__init__(
            ModuleContext(client, "bookings", "v2", "reservations/bookings")
        )

    async def list_bookings(
        self, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """
        List bookings.

        Args:
            params: Filters such as ``stayFilter``, ``page``, ``size``

        Returns:
            ``{"data": [...], "count": n}``
        """
        result = await self._ctx.list("", params)
        return normalize_list_response(result)

    async def get_booking(self, booking_id: str | int) -> Any:
        """Get a booking by ID."""
        return await self._ctx.get("", booking_id)

    async def create_booking(self, booking: dict[str, Any]) -> Any:
        """
        Create a booking.

        Args:
            booking: Booking payload with ``propertyId``, ``checkIn``,
                ``checkOut``, ``guest.name`` and ``guestBreakdown.adults``

        Raises:
            ValidationError: If a required field is missing
        """
        path = self._ctx.build_endpoint()
        if not booking.get("propertyId"):
            raise ValidationError("Property ID is required", path=path)
        if not booking.get("checkIn") or not booking.get("checkOut"):
            raise ValidationError(
                "Check-in and check-out dates are required", path=path
            )
        if not (booking.get("guest") or {}).get("name"):
            raise ValidationError("Guest name is required", path=path)
        if not (booking.get("guestBreakdown") or {}).get("adults"):
            raise ValidationError("At least one adult guest is required", path=path)

        return await self._ctx.create("", booking)

    async def update_booking(
        self, booking_id: str | int, updates: dict[str, Any]
    ) -> Any:
        """Update an existing booking."""
        return await self._ctx.update("", booking_id, updates)

    async def delete_booking(self, booking_id: str | int) -> dict[str, Any]:
        """
        Cancel a booking.

        API failures are reported in the result instead of raised; local
        guards (read-only mode, rate limit, validation) still raise.

        Returns:
            ``{"success": bool, "message": str}``
        """
        try:
            await self._ctx.delete("", booking_id)
        except ApiError as e:
            logger.warning(
                f"Failed to cancel booking {booking_id}: {e}",
                extra={"booking_id": booking_id, "status_code": e.status},
            )
            return {"success": False, "message": e.message}

        return {"success": True, "message": f"Booking {booking_id} has been cancelled"}

    async def get_booking_payment_link(self, booking_id: str | int) -> Any:
        return await self._ctx.request(
            "GET", f"{self._booking_path(booking_id)}/quote/paymentLink"
        )

    async def create_booking_payment_link(
        self, booking_id: str | int, payment_request: dict[str, Any]
    ) -> Any:
        """
        Create a payment link for a booking.

        Args:
            booking_id: Booking ID
            payment_request: ``{"amount", "currency", "description"?}``
        """
        item = self._booking_path(booking_id)
        path = self._ctx.build_endpoint(f"{item}/quote/paymentLink")
        if not payment_request:
            raise ValidationError("Payload is required", path=path)
        amount = payment_request.get("amount")
        if not isinstance(amount, int | float) or amount <= 0:
            raise ValidationError("Valid payment amount is required", path=path)
        if not payment_request.get("currency"):
            raise ValidationError("Currency is required", path=path)

        return await self._ctx.request(
            "POST", f"{item}/quote/paymentLink", body=payment_request
        )

    async def update_key_codes(
        self, booking_id: str | int, key_codes: dict[str, Any]
    ) -> Any:
        """Replace the access key codes of a booking."""
        item = self._booking_path(booking_id)
        if not key_codes.get("keyCodes"):
            raise ValidationError(
                "At least one key code is required",
                path=self._ctx.build_endpoint(f"{item}/keyCodes"),
            )

        return await self._ctx.request("PUT", f"{item}/keyCodes", body=key_codes)

    async def checkin_booking(
        self, booking_id: str | int, time: str | None = None
    ) -> Any:
        """Mark a booking as checked in, optionally at a given time."""
        return await self._ctx.request(
            "PUT",
            f"{self._booking_path(booking_id)}/checkin",
            body={"time": time} if time else {},
        )

    async def checkout_booking(
        self, booking_id: str | int, time: str | None = None
    ) -> Any:
        """Mark a booking as checked out, optionally at a given time."""
        return await self._ctx.request(
            "PUT",
            f"{self._booking_path(booking_id)}/checkout",
            body={"time": time} if time else {},
        )

    async def get_external_bookings(self, booking_id: str | int) -> Any:
        return await self._ctx.request(
            "GET", f"{self._booking_path(booking_id)}/externalBookings"
        )

    async def search_bookings(self, criteria: dict[str, Any]) -> dict[str, Any]:
        """
        Search bookings by guest, property, check-in range or status.

        Args:
            criteria: Any of ``guestName``, ``guestEmail``, ``propertyId``,
                ``dateRange`` (``{"from", "to"}``) and ``status``
        """
        params: dict[str, Any] = {}
        for key in ("guestName", "guestEmail", "propertyId", "status"):
            if criteria.get(key):
                params[key] = criteria[key]

        date_range = criteria.get("dateRange")
        if date_range:
            params["checkInFrom"] = date_range.get("from")
            params["checkInTo"] = date_range.get("to")

        return await self.list_bookings(params)

    async def get_upcoming_bookings(
        self, property_id: str | int | None = None, limit: int = 10
    ) -> dict[str, Any]:
        """Bookings checking in from today, earliest first."""
        return await self.list_bookings(
            {
                "propertyId": property_id,
                "checkInFrom": date.today().isoformat(),
                "sort": "checkIn",
                "order": "asc",
                "limit": limit,
                "status": list(UPCOMING_STATUSES),
            }
        )

    async def get_bookings_for_date_range(
        self, from_date: str, to_date: str, property_id: str | int | None = None
    ) -> dict[str, Any]:
        return await self.list_bookings(
            {
                "propertyId": property_id,
                "checkInFrom": from_date,
                "checkOutTo": to_date,
                "sort": "checkIn",
                "order": "asc",
            }
        )

    def _booking_path(self, booking_id: Any) -> str:
        if booking_id is None or booking_id == "":
            raise ValidationError(
                "Booking ID is required", path=self._ctx.build_endpoint()
            )
        return encode_id(booking_id)
