"""Webhooks API client for Lodgify (v1 API)."""

from typing import TYPE_CHECKING, Any

from lodgify_mcp.clients.base_module import DomainModule, ModuleContext
from lodgify_mcp.config.constants import WEBHOOK_EVENTS
from lodgify_mcp.utils.exceptions import ValidationError
from lodgify_mcp.utils.validators import validate_url

if TYPE_CHECKING:
    from lodgify_mcp.clients.orchestrator import ApiClientOrchestrator


class WebhooksClient(DomainModule):
    """
    Client for webhook subscriptions.

    The webhook resource carries its own version segment, so requests go to
    ``/v1/webhooks/v1/...``.
    """

    def __init__(self, client: "ApiClientOrchestrator") -> None:
        super().__init__(ModuleContext(client, "webhooks", "v1", "webhooks/v1"))

    async def list_webhooks(self, params: dict[str, Any] | None = None) -> Any:
        """List webhook subscriptions."""
        return await self._ctx.request("GET", "list", params=params)

    async def subscribe_webhook(self, data: dict[str, Any]) -> Any:
        """
        Subscribe a target URL to a webhook event.

        Args:
            data: ``{"target_url": str, "event": str}``

        Raises:
            ValidationError: If the URL is not absolute http(s) or the
                event is not a known webhook event
        """
        path = self._ctx.build_endpoint("subscribe")
        if not isinstance(data, dict) or not data:
            raise ValidationError("Webhook subscription data is required", path=path)

        target_url = data.get("target_url")
        event = data.get("event")
        if not target_url or not event:
            raise ValidationError(
                "Both target_url and event are required for webhook subscription",
                path=path,
            )

        try:
            validate_url(target_url)
        except ValidationError as e:
            raise ValidationError(
                "target_url must be a valid URL", path=path, detail={"reason": e.message}
            ) from e

        if event not in WEBHOOK_EVENTS:
            raise ValidationError(
                f"Unknown webhook event '{event}'",
                path=path,
                detail={"allowed_events": list(WEBHOOK_EVENTS)},
            )

        return await self._ctx.request("POST", "subscribe", body=data)

    async def unsubscribe_webhook(self, data: dict[str, Any]) -> Any:
        """Unsubscribe a webhook; ``data`` must carry the subscription ``id``."""
        if not isinstance(data, dict) or not data.get("id"):
            raise ValidationError(
                "Webhook ID is required for unsubscribing",
                path=self._ctx.build_endpoint("unsubscribe"),
            )

        return await self._ctx.request("DELETE", "unsubscribe", body=data)

    async def delete_webhook(self, webhook_id: str | int) -> Any:
        return await self._ctx.delete("", webhook_id)
