"""V1 rates API client for Lodgify."""

from typing import TYPE_CHECKING, Any

from lodgify_mcp.clients.base_module import DomainModule, ModuleContext
from lodgify_mcp.utils.exceptions import ValidationError
from lodgify_mcp.utils.validators import validate_date_range

if TYPE_CHECKING:
    from lodgify_mcp.clients.orchestrator import ApiClientOrchestrator


class RatesV1Client(DomainModule):
    """Client for the v1-only rate update endpoint."""

    def __init__(self, client: "ApiClientOrchestrator") -> None:
        super().__init__(ModuleContext(client, "rates-v1", "v1", "rates"))

    async def update_rates_v1(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Update rates without touching availability.

        ``POST /v1/rates/savewithoutavailability``

        Args:
            data: ``{"property_id": int, "rates": [{"room_type_id",
                "start_date", "end_date", "price_per_day", "min_stay"?,
                "currency"?}]}``

        Returns:
            Summary with ``success``, ``message``, ``updated_rates`` and
            ``property_id``

        Raises:
            ValidationError: If the payload or any rate entry is invalid
        """
        path = self._ctx.build_endpoint("savewithoutavailability")
        if not isinstance(data, dict) or not data:
            raise ValidationError("Rate data is required", path=path)
        if not data.get("property_id"):
            raise ValidationError("Property ID is required", path=path)

        rates = data.get("rates")
        if not isinstance(rates, list) or not rates:
            raise ValidationError("At least one rate entry is required", path=path)

        for index, rate in enumerate(rates):
            self._validate_entry(rate, index, path)

        await self._ctx.request("POST", "savewithoutavailability", body=data)

        return {
            "success": True,
            "message": (
                f"Successfully updated {len(rates)} rate entries "
                f"for property {data['property_id']}"
            ),
            "updated_rates": len(rates),
            "property_id": data["property_id"],
        }

    @staticmethod
    def _validate_entry(rate: dict[str, Any], index: int, path: str) -> None:
        detail = {"index": index}
        if not rate.get("room_type_id"):
            raise ValidationError(
                "Room type ID is required for all rate entries",
                path=path,
                detail=detail,
            )
        if not rate.get("start_date") or not rate.get("end_date"):
            raise ValidationError(
                "Start date and end date are required for all rate entries",
                path=path,
                detail=detail,
            )

        price = rate.get("price_per_day")
        if isinstance(price, bool) or not isinstance(price, int | float) or price < 0:
            raise ValidationError(
                "Valid price per day is required for all rate entries",
                path=path,
                detail=detail,
            )

        try:
            validate_date_range(
                rate["start_date"], rate["end_date"], allow_same_day=True
            )
        except ValidationError as e:
            raise ValidationError(e.message, path=path, detail=detail) from e

        min_stay = rate.get("min_stay")
        if min_stay is not None and (
            isinstance(min_stay, bool)
            or not isinstance(min_stay, int | float)
            or min_stay < 0
        ):
            raise ValidationError(
                "Min stay must be a non-negative number", path=path, detail=detail
            )
