"""
Webhook subscription tools for the Lodgify MCP server.
"""

from typing import Any

from fastmcp import FastMCP

from lodgify_mcp.utils.client_factory import ensure_write_allowed, get_orchestrator
from lodgify_mcp.utils.validators import validate_identifier


def register_webhook_tools(app: FastMCP):
    """Register all webhook MCP tools."""

    @app.tool()
    async def lodgify_list_webhooks() -> dict[str, Any]:
        """
        List webhook subscriptions.

        Returns:
            Dictionary containing the subscriptions
        """
        webhooks = await get_orchestrator().webhooks.list_webhooks()
        return {"success": True, "webhooks": webhooks}

    @app.tool()
    async def lodgify_subscribe_webhook(event: str, target_url: str) -> dict[str, Any]:
        """
        Subscribe a URL to a webhook event.

        Args:
            event: Event name, e.g. booking_change or guest_message_received
            target_url: Absolute http(s) URL that receives the event

        Returns:
            Dictionary containing the subscription
        """
        client = ensure_write_allowed("lodgify_subscribe_webhook", "Subscribe webhook")
        result = await client.webhooks.subscribe_webhook(
            {"event": event, "target_url": target_url}
        )
        return {"success": True, "subscription": result}

    @app.tool()
    async def lodgify_unsubscribe_webhook(webhook_id: str) -> dict[str, Any]:
        """
        Remove a webhook subscription.

        Args:
            webhook_id: Subscription identifier

        Returns:
            Dictionary containing the removal confirmation
        """
        client = ensure_write_allowed(
            "lodgify_unsubscribe_webhook", "Unsubscribe webhook"
        )
        webhook_id = validate_identifier(webhook_id, "Webhook ID")
        await client.webhooks.unsubscribe_webhook({"id": webhook_id})
        return {
            "success": True,
            "webhook_id": webhook_id,
            "message": f"Webhook {webhook_id} unsubscribed",
        }
