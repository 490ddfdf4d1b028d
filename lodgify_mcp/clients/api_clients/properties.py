"""
Properties API client for Lodgify.

Handles property listings, room types, deleted properties and the
name-based property search used by the MCP tools.
"""

import logging
from typing import TYPE_CHECKING, Any

from lodgify_mcp.clients.base_module import DomainModule, ModuleContext, encode_id
from lodgify_mcp.models.common import normalize_list_response
from lodgify_mcp.utils.exceptions import LodgifyError, ValidationError

if TYPE_CHECKING:
    from lodgify_mcp.clients.orchestrator import ApiClientOrchestrator

logger = logging.getLogger(__name__)

NO_MATCH_SUGGESTIONS = [
    "Try a different search term",
    "Check if the property exists in the system",
    "Use list_properties to see all available properties",
]


class PropertiesClient(DomainModule):
    """
    Client for the v2 properties endpoints.

    Provides listing, retrieval and search of properties together with the
    room types, availability settings and statistics attached to them.
    """

    def __init__(self, client: "ApiClientOrchestrator") -> None:
        super().__init__(ModuleContext(client, "properties", "v2", "properties"))

    async def list_properties(
        self, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """
        List properties.

        Args:
            params: Optional filters and paging (``page``, ``size``, ...)

        Returns:
            ``{"data": [...], "count": n}`` regardless of the response shape
        """
        result = await self._ctx.list("", params)
        return normalize_list_response(result)

    async def get_property(self, property_id: str | int) -> Any:
        """Get a single property by ID."""
        return await self._ctx.get("", property_id)

    async def list_property_rooms(self, property_id: str | int) -> list[Any]:
        """List the room types of a property."""
        self._require_id(property_id, "rooms")

        result = await self._ctx.request("GET", f"{encode_id(property_id)}/rooms")
        if isinstance(result, list):
            return result
        if isinstance(result, dict) and isinstance(result.get("data"), list):
            return result["data"]
        return []

    async def list_deleted_properties(
        self, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """List deleted properties (``GET /v2/deletedProperties``)."""
        result = await self.client.request(
            "GET", "deletedProperties", params=params, api_version="v2"
        )
        return normalize_list_response(result)

    async def find_properties(
        self,
        search_term: str | None = None,
        include_bookings: bool = True,
        limit: int = 10,
    ) -> dict[str, Any]:
        """
        Find properties by name.

        Searches the property list first and, while fewer than ``limit``
        matches were found, the property references of recent bookings.
        Failures of the booking lookup are logged and ignored.

        Args:
            search_term: Case-insensitive substring of the property name
            include_bookings: Also look at recent bookings
            limit: Maximum number of properties returned

        Returns:
            Dictionary with ``properties``, ``message`` and, when nothing
            matched, ``suggestions``
        """
        needle = search_term.lower() if search_term else None
        found: list[dict[str, Any]] = []

        properties = await self.list_properties({"limit": 50})
        for prop in properties["data"]:
            if not isinstance(prop, dict):
                continue
            name = prop.get("name") or f"Property {prop.get('id')}"
            if needle is None or needle in name.lower():
                found.append(
                    {"id": str(prop.get("id")), "name": name, "source": "properties"}
                )
                if len(found) >= limit:
                    break

        if include_bookings and len(found) < limit:
            try:
                found.extend(
                    await self._properties_from_bookings(needle, limit - len(found))
                )
            except LodgifyError as e:
                logger.debug(
                    f"Could not search bookings for properties: {e}",
                    extra={"error_type": type(e).__name__},
                )

        found = found[:limit]
        if search_term:
            message = f'Found {len(found)} property(ies) matching "{search_term}"'
        else:
            message = f"Found {len(found)} property(ies)"

        result: dict[str, Any] = {"properties": found, "message": message}
        if not found:
            result["suggestions"] = list(NO_MATCH_SUGGESTIONS)
        return result

    async def _properties_from_bookings(
        self, needle: str | None, max_results: int
    ) -> list[dict[str, Any]]:
        result = await self.client.request(
            "GET", "reservations/bookings", params={"limit": 20}, api_version="v2"
        )
        bookings = normalize_list_response(result)["data"]

        seen: set[str] = set()
        found: list[dict[str, Any]] = []
        for booking in bookings:
            if not isinstance(booking, dict) or not booking.get("propertyId"):
                continue
            property_id = str(booking["propertyId"])
            if property_id in seen:
                continue
            seen.add(property_id)

            name = booking.get("propertyName") or f"Property {property_id}"
            if needle is None or needle in name.lower():
                found.append(
                    {
                        "id": property_id,
                        "name": f"{name} (from booking)",
                        "source": "bookings",
                    }
                )
                if len(found) >= max_results:
                    break
        return found

    async def update_property_availability(
        self, property_id: str | int, availability: dict[str, Any]
    ) -> Any:
        """Update availability settings of a property."""
        self._require_id(property_id, "availability")
        return await self._ctx.request(
            "PUT", f"{encode_id(property_id)}/availability", body=availability
        )

    async def get_property_statistics(
        self, property_id: str | int, params: dict[str, Any] | None = None
    ) -> Any:
        self._require_id(property_id, "statistics")
        return await self._ctx.request(
            "GET", f"{encode_id(property_id)}/statistics", params=params
        )

    def _require_id(self, property_id: Any, suffix: str) -> None:
        if property_id is None or property_id == "":
            raise ValidationError(
                "Property ID is required",
                path=self._ctx.build_endpoint(suffix),
            )
