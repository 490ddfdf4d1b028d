"""
Rates API client for Lodgify.

Responses of the rate endpoints are validated against the models in
``lodgify_mcp.models.rates``; a response that does not match raises
``SerializationError``.
"""

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from lodgify_mcp.clients.base_module import DomainModule, ModuleContext
from lodgify_mcp.models.rates import (
    DailyRatesResponse,
    RateOperationResponse,
    RateSettingsResponse,
)
from lodgify_mcp.utils.exceptions import SerializationError, ValidationError

if TYPE_CHECKING:
    from lodgify_mcp.clients.orchestrator import ApiClientOrchestrator


def _format_errors(error: PydanticValidationError) -> str:
    return ", ".join(
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
        for item in error.errors()
    )


class RatesClient(DomainModule):
    """Client for the v2 rates endpoints."""

    def __init__(self, client: "ApiClientOrchestrator") -> None:
        super().__init__(ModuleContext(client, "rates", "v2", "rates"))

    async def get_daily_rates(self, params: dict[str, Any]) -> dict[str, Any]:
        """
        Get the daily rates calendar.

        Args:
            params: ``roomTypeId``, ``houseId``, ``startDate``, ``endDate``

        Returns:
            Validated daily rates response

        Raises:
            ValidationError: If no parameters were given
            SerializationError: If the response does not match the model
        """
        if params is None:
            raise ValidationError(
                "Parameters are required for daily rates",
                path=self._ctx.build_endpoint("calendar"),
            )

        response = await self._ctx.request("GET", "calendar", params=params)
        return self._parse(DailyRatesResponse, response, "daily rates", "calendar")

    async def get_rate_settings(self, params: dict[str, Any]) -> dict[str, Any]:
        """Get rate settings (``GET /v2/rates/settings``)."""
        if params is None:
            raise ValidationError(
                "Parameters are required for rate settings",
                path=self._ctx.build_endpoint("settings"),
            )

        response = await self._ctx.request("GET", "settings", params=params)
        return self._parse(RateSettingsResponse, response, "rate settings", "settings")

    async def create_rate(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create or update rates for a property and room type."""
        if not isinstance(payload, dict) or not payload:
            raise ValidationError(
                "Payload is required", path=self._ctx.build_endpoint()
            )

        response = await self._ctx.request("POST", "", body=payload)
        return self._parse(RateOperationResponse, response, "create rate", "")

    async def update_rate(
        self, rate_id: str | int, payload: dict[str, Any]
    ) -> dict[str, Any]:
        """Update an existing rate entry."""
        if not isinstance(payload, dict) or not payload:
            raise ValidationError(
                "Payload is required", path=self._ctx.build_endpoint(str(rate_id))
            )

        response = await self._ctx.update("", rate_id, payload)
        return self._parse(
            RateOperationResponse, response, "update rate", str(rate_id)
        )

    def _parse(
        self, model: type[BaseModel], response: Any, label: str, path: str
    ) -> dict[str, Any]:
        try:
            parsed = model.model_validate(response)
        except PydanticValidationError as e:
            raise SerializationError(
                f"Invalid {label} response format: {_format_errors(e)}",
                status=200,
                path=self._ctx.build_endpoint(path),
                detail={"errors": e.errors(include_url=False, include_input=False)},
            ) from e
        return parsed.model_dump(by_alias=True, exclude_none=True, mode="json")
