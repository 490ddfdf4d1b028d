"""
V1 bookings API client for Lodgify.

Create, update and delete of reservations are only available in the v1
API. Callers pass a flat booking description that is transformed into the
nested payload the v1 endpoints expect.
"""

import logging
from typing import TYPE_CHECKING, Any

from lodgify_mcp.clients.base_module import DomainModule, ModuleContext
from lodgify_mcp.config.constants import V1_BOOKING_STATUS_MAP
from lodgify_mcp.utils.exceptions import ApiError, ValidationError
from lodgify_mcp.utils.validators import validate_date_string

if TYPE_CHECKING:
    from lodgify_mcp.clients.orchestrator import ApiClientOrchestrator

logger = logging.getLogger(__name__)

DEFAULT_V1_STATUS = "Booked"


def split_guest_name(full_name: str) -> dict[str, str]:
    """Split ``"First Middle Last"`` into ``first_name``/``last_name``."""
    parts = full_name.strip().split(" ")
    return {"first_name": parts[0], "last_name": " ".join(parts[1:])}


def map_booking_status(status: str | None) -> str:
    return V1_BOOKING_STATUS_MAP.get((status or "booked").lower(), DEFAULT_V1_STATUS)


def build_create_payload(booking: dict[str, Any]) -> dict[str, Any]:
    """Transform a flat booking request into the nested v1 payload."""
    return {
        "property_id": booking["property_id"],
        "arrival": booking["arrival"],
        "departure": booking["departure"],
        "guest": {
            "guest_name": split_guest_name(booking["guest_name"]),
            "email": booking.get("guest_email") or None,
            "phone": booking.get("guest_phone") or None,
        },
        "rooms": [
            {
                "room_type_id": booking.get("room_type_id") or 0,
                "guest_breakdown": {
                    "adults": booking["adults"],
                    "children": booking.get("children") or 0,
                    "infants": booking.get("infants") or 0,
                },
            }
        ],
        "status": map_booking_status(booking.get("status")),
        "source_text": booking.get("source") or None,
    }


def build_update_payload(updates: dict[str, Any]) -> dict[str, Any]:
    """Transform a partial flat update into the nested v1 payload."""
    payload: dict[str, Any] = {}

    for key in ("property_id", "arrival", "departure"):
        if updates.get(key) is not None:
            payload[key] = updates[key]

    if any(updates.get(k) for k in ("guest_name", "guest_email", "guest_phone")):
        guest_name = (
            split_guest_name(updates["guest_name"])
            if updates.get("guest_name")
            else {"first_name": None, "last_name": None}
        )
        payload["guest"] = {
            "guest_name": guest_name,
            "email": updates.get("guest_email") or None,
            "phone": updates.get("guest_phone") or None,
        }

    room_keys = ("room_type_id", "adults", "children", "infants")
    if any(updates.get(k) is not None for k in room_keys):
        payload["rooms"] = [
            {
                "room_type_id": updates.get("room_type_id") or 0,
                "guest_breakdown": {
                    "adults": updates.get("adults") or 1,
                    "children": updates.get("children") or 0,
                    "infants": updates.get("infants") or 0,
                },
            }
        ]

    if updates.get("status"):
        payload["status"] = map_booking_status(updates["status"])

    if "source" in updates:
        payload["source_text"] = updates["source"] or None

    return payload


class BookingsV1Client(DomainModule):
    """Client for ``/v1/reservation/booking``."""

    def __init__(self, client: "ApiClientOrchestrator") -> None:
        super().__init__(
            ModuleContext(client, "bookings-v1", "v1", "reservation/booking")
        )

    async def create_booking_v1(self, booking: dict[str, Any]) -> Any:
        """
        Create a booking through the v1 API.

        Args:
            booking: Flat request with ``property_id``, ``room_type_id``,
                ``arrival``, ``departure`` (YYYY-MM-DD), ``guest_name``,
                ``adults`` and optional ``children``, ``infants``,
                ``guest_email``, ``guest_phone``, ``status``, ``source``

        Raises:
            ValidationError: If a required field is missing or malformed
        """
        path = self._ctx.build_endpoint()
        if not booking.get("property_id"):
            raise ValidationError("Property ID is required", path=path)
        if not booking.get("arrival") or not booking.get("departure"):
            raise ValidationError("Arrival and departure dates are required", path=path)
        if not booking.get("guest_name"):
            raise ValidationError("Guest name is required", path=path)
        if not booking.get("adults") or booking["adults"] < 1:
            raise ValidationError("At least one adult guest is required", path=path)
        if not booking.get("room_type_id"):
            raise ValidationError("Room type ID is required", path=path)

        self._check_date(booking["arrival"], "arrival date", path)
        self._check_date(booking["departure"], "departure date", path)

        return await self._ctx.create("", build_create_payload(booking))

    async def update_booking_v1(
        self, booking_id: str | int, updates: dict[str, Any]
    ) -> Any:
        """Apply a partial update to a v1 booking."""
        path = self._ctx.build_endpoint(str(booking_id))
        if not updates:
            raise ValidationError("Update data is required", path=path)
        if updates.get("arrival"):
            self._check_date(updates["arrival"], "arrival date", path)
        if updates.get("departure"):
            self._check_date(updates["departure"], "departure date", path)
        if updates.get("adults") is not None and updates["adults"] < 1:
            raise ValidationError("At least one adult guest is required", path=path)

        return await self._ctx.update("", booking_id, build_update_payload(updates))

    async def delete_booking_v1(self, booking_id: str | int) -> Any:
        return await self._ctx.delete("", booking_id)

    async def get_booking_v1(self, booking_id: str | int) -> Any:
        return await self._ctx.get("", booking_id)

    async def booking_exists_v1(self, booking_id: str | int) -> bool:
        """Return whether the API knows the booking; API errors mean ``False``."""
        if not booking_id:
            return False

        try:
            await self._ctx.get("", booking_id)
        except ApiError as e:
            logger.debug(
                f"Booking {booking_id} lookup failed: {e}",
                extra={"booking_id": booking_id, "status_code": e.status},
            )
            return False
        return True

    @staticmethod
    def _check_date(value: str, field: str, path: str) -> None:
        try:
            validate_date_string(value, field)
        except ValidationError as e:
            raise ValidationError(
                f"{field.capitalize()} must be in YYYY-MM-DD format", path=path
            ) from e
