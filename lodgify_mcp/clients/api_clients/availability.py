"""Availability API client for Lodgify."""

from typing import TYPE_CHECKING, Any

from lodgify_mcp.clients.base_module import DomainModule, ModuleContext, encode_id
from lodgify_mcp.utils.exceptions import ValidationError

if TYPE_CHECKING:
    from lodgify_mcp.clients.orchestrator import ApiClientOrchestrator


def _to_start(value: str) -> str:
    return value if "T" in value else f"{value}T00:00:00Z"


def _to_end(value: str) -> str:
    return value if "T" in value else f"{value}T23:59:59Z"


def build_availability_params(params: dict[str, Any] | None) -> dict[str, Any]:
    """
    Translate ``from``/``to`` query dates into the ``start``/``end`` datetimes
    the availability API expects.

    Date-only values are widened to the start and end of the day in UTC.
    ``includeDetails`` is requested when both ends of the range are given.
    """
    params = params or {}
    api_params: dict[str, Any] = {}

    if params.get("from"):
        api_params["start"] = _to_start(params["from"])
    if params.get("to"):
        api_params["end"] = _to_end(params["to"])
    if params.get("from") and params.get("to"):
        api_params["includeDetails"] = True

    return api_params


class AvailabilityClient(DomainModule):
    """Client for the v2 availability calendar endpoints."""

    def __init__(self, client: "ApiClientOrchestrator") -> None:
        super().__init__(ModuleContext(client, "availability", "v2", "availability"))

    async def get_availability_all(self, params: dict[str, Any] | None = None) -> Any:
        """Get availability across every property of the account."""
        api_params = build_availability_params(params)
        for key in ("propertyId", "roomTypeId"):
            if params and params.get(key):
                api_params[key] = params[key]

        return await self._ctx.request("GET", "", params=api_params or None)

    async def get_availability_for_property(
        self, property_id: str | int, params: dict[str, Any] | None = None
    ) -> Any:
        """Get availability for one property."""
        if not property_id:
            raise ValidationError(
                "Property ID is required", path=self._ctx.build_endpoint()
            )

        return await self._ctx.request(
            "GET", encode_id(property_id), params=build_availability_params(params)
        )

    async def get_availability_for_room(
        self,
        property_id: str | int,
        room_type_id: str | int,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Get availability for one room type of a property."""
        if not property_id or not room_type_id:
            raise ValidationError(
                "Property ID and Room Type ID are required",
                path=self._ctx.build_endpoint(),
            )

        return await self._ctx.request(
            "GET",
            f"{encode_id(property_id)}/{encode_id(room_type_id)}",
            params=build_availability_params(params),
        )

    async def update_property_availability(
        self, property_id: str | int, payload: dict[str, Any]
    ) -> Any:
        """
        Update availability settings of a property.

        The endpoint lives on the properties resource
        (``PUT /v2/properties/{id}/availability``), so the request bypasses
        this module's base path.
        """
        if not property_id:
            raise ValidationError(
                "Property ID is required", path="properties/availability"
            )
        if not isinstance(payload, dict) or not payload:
            raise ValidationError(
                "Payload is required",
                path=f"properties/{encode_id(property_id)}/availability",
            )

        return await self.client.request(
            "PUT",
            f"properties/{encode_id(property_id)}/availability",
            body=payload,
            api_version=self.version,
        )
