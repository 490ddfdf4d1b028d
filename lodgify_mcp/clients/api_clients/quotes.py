"""Quotes API client for Lodgify."""

from typing import TYPE_CHECKING, Any

from lodgify_mcp.clients.base_module import DomainModule, ModuleContext, encode_id
from lodgify_mcp.utils.exceptions import ValidationError

if TYPE_CHECKING:
    from lodgify_mcp.clients.orchestrator import ApiClientOrchestrator


def convert_quote_request(request: dict[str, Any]) -> dict[str, Any]:
    """
    Convert a structured quote request into the query parameters the quote
    endpoint expects.

    ``guestBreakdown`` becomes ``guest_breakdown[adults|children|infants]``
    and each entry of ``roomTypes`` becomes ``roomTypes[i].Id`` plus an
    optional ``roomTypes[i].quantity``.
    """
    breakdown = request.get("guestBreakdown") or {}
    params: dict[str, Any] = {
        "from": request.get("from"),
        "to": request.get("to"),
        "guest_breakdown[adults]": breakdown.get("adults"),
        "currency": request.get("currency"),
        "includeExtras": request.get("includeExtras"),
        "includeBreakdown": request.get("includeBreakdown"),
    }

    if breakdown.get("children") is not None:
        params["guest_breakdown[children]"] = breakdown["children"]
    if breakdown.get("infants") is not None:
        params["guest_breakdown[infants]"] = breakdown["infants"]

    for index, room_type in enumerate(request.get("roomTypes") or []):
        params[f"roomTypes[{index}].Id"] = room_type.get("Id", room_type.get("id"))
        if room_type.get("quantity") is not None:
            params[f"roomTypes[{index}].quantity"] = room_type["quantity"]

    return params


class QuotesClient(DomainModule):
    """Client for ``GET /v2/quote/{propertyId}``."""

    def __init__(self, client: "ApiClientOrchestrator") -> None:
        super().__init__(ModuleContext(client, "quotes", "v2", "quote"))

    async def get_quote(self, property_id: str | int, request: dict[str, Any]) -> Any:
        """
        Get a price quote using a structured request.

        Args:
            property_id: Property to quote
            request: ``from``, ``to``, ``guestBreakdown``, ``roomTypes`` and
                optional ``currency``/``includeExtras``/``includeBreakdown``
        """
        self._require_property(property_id)
        if not isinstance(request, dict) or not request:
            raise ValidationError(
                "Valid quote request object is required",
                path=self._ctx.build_endpoint(encode_id(property_id)),
            )

        return await self._ctx.request(
            "GET", encode_id(property_id), params=convert_quote_request(request)
        )

    async def get_quote_raw(
        self, property_id: str | int, params: dict[str, Any]
    ) -> Any:
        """Get a price quote passing query parameters through unchanged."""
        self._require_property(property_id)
        if not isinstance(params, dict) or not params:
            raise ValidationError(
                "Valid parameters object is required for quote",
                path=self._ctx.build_endpoint(encode_id(property_id)),
            )

        return await self._ctx.request("GET", encode_id(property_id), params=params)

    def _require_property(self, property_id: Any) -> None:
        if property_id is None or property_id == "":
            raise ValidationError(
                "Property ID is required", path=self._ctx.build_endpoint()
            )
