"""Messaging API client for Lodgify."""

import re
from typing import TYPE_CHECKING, Any

from lodgify_mcp.clients.base_module import DomainModule, ModuleContext
from lodgify_mcp.config.constants import MAX_THREAD_GUID_LENGTH
from lodgify_mcp.utils.exceptions import ValidationError

if TYPE_CHECKING:
    from lodgify_mcp.clients.orchestrator import ApiClientOrchestrator

_THREAD_GUID = re.compile(r"^[A-Za-z0-9_-]+$")


def validate_thread_guid(thread_guid: Any) -> str:
    """
    Validate a message thread GUID.

    Only letters, digits, hyphens and underscores are accepted, up to
    ``MAX_THREAD_GUID_LENGTH`` characters.

    Raises:
        ValidationError: If the GUID is missing or malformed
    """
    if not thread_guid or not isinstance(thread_guid, str):
        raise ValidationError(
            "Thread GUID is required and must be a string", path="messaging"
        )

    if len(thread_guid) > MAX_THREAD_GUID_LENGTH or not _THREAD_GUID.match(
        thread_guid
    ):
        raise ValidationError(
            "Thread GUID contains invalid characters or invalid length",
            path="messaging",
        )

    return thread_guid


class MessagingClient(DomainModule):
    """Client for the v2 messaging thread endpoints."""

    def __init__(self, client: "ApiClientOrchestrator") -> None:
        super().__init__(ModuleContext(client, "messaging", "v2", "messaging"))

    async def get_thread(
        self, thread_guid: str, params: dict[str, Any] | None = None
    ) -> Any:
        """Get a message thread with its messages."""
        guid = validate_thread_guid(thread_guid)
        return await self._ctx.request("GET", guid, params=params)

    async def list_threads(self, params: dict[str, Any] | None = None) -> Any:
        return await self._ctx.list("", params)

    async def send_message(self, thread_guid: str, message: dict[str, Any]) -> Any:
        """
        Send a message to a thread.

        Args:
            thread_guid: Thread identifier
            message: ``{"content": str, "attachments"?: [...]}``
        """
        guid = validate_thread_guid(thread_guid)
        if not message or not message.get("content"):
            raise ValidationError(
                "Message content is required",
                path=self._ctx.build_endpoint(f"{guid}/messages"),
            )

        return await self._ctx.request("POST", f"{guid}/messages", body=message)

    async def mark_thread_as_read(self, thread_guid: str) -> Any:
        guid = validate_thread_guid(thread_guid)
        return await self._ctx.request("PUT", f"{guid}/read")

    async def archive_thread(self, thread_guid: str) -> Any:
        guid = validate_thread_guid(thread_guid)
        return await self._ctx.request("PUT", f"{guid}/archive")
