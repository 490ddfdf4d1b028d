"""
Guest messaging tools for the Lodgify MCP server.
"""

from typing import Any

from fastmcp import FastMCP

from lodgify_mcp.config.constants import MAX_MESSAGE_LIMIT, MIN_MESSAGE_LIMIT
from lodgify_mcp.utils.client_factory import ensure_write_allowed, get_orchestrator
from lodgify_mcp.utils.exceptions import ValidationError


def register_messaging_tools(app: FastMCP):
    """Register all messaging MCP tools."""

    @app.tool()
    async def lodgify_get_thread(thread_guid: str) -> dict[str, Any]:
        """
        Get a conversation thread with its messages.

        Args:
            thread_guid: Thread identifier

        Returns:
            Dictionary containing the thread
        """
        thread = await get_orchestrator().messaging.get_thread(thread_guid)
        return {"success": True, "thread": thread}

    @app.tool()
    async def lodgify_list_threads(
        include_messages: bool = False,
        include_participants: bool = False,
        message_limit: int | None = None,
        include_unread_only: bool = False,
    ) -> dict[str, Any]:
        """
        List conversation threads.

        Args:
            include_messages: Include message bodies
            include_participants: Include participant details
            message_limit: Maximum messages per thread (1-200)
            include_unread_only: Only threads with unread messages

        Returns:
            Dictionary containing the threads
        """
        if message_limit is not None and not (
            MIN_MESSAGE_LIMIT <= message_limit <= MAX_MESSAGE_LIMIT
        ):
            raise ValidationError(
                f"Message limit must be between {MIN_MESSAGE_LIMIT} "
                f"and {MAX_MESSAGE_LIMIT}"
            )

        params = {
            "includeMessages": include_messages,
            "includeParticipants": include_participants,
            "messageLimit": message_limit,
            "includeUnreadOnly": include_unread_only,
        }
        threads = await get_orchestrator().messaging.list_threads(params)
        return {"success": True, "threads": threads}

    @app.tool()
    async def lodgify_send_message(
        thread_guid: str,
        content: str,
        attachments: list[dict[str, str]] | None = None,
    ) -> dict[str, Any]:
        """
        Send a message to a guest conversation.

        Args:
            thread_guid: Thread identifier
            content: Message text
            attachments: Optional files as fileName/fileUrl/fileType entries

        Returns:
            Dictionary containing the sent message
        """
        client = ensure_write_allowed("lodgify_send_message", "Send message")

        message: dict[str, Any] = {"content": content}
        if attachments:
            message["attachments"] = attachments

        result = await client.messaging.send_message(thread_guid, message)
        return {"success": True, "thread_guid": thread_guid, "message": result}

    @app.tool()
    async def lodgify_mark_thread_read(thread_guid: str) -> dict[str, Any]:
        """Mark all messages of a thread as read."""
        client = ensure_write_allowed("lodgify_mark_thread_read", "Mark thread as read")
        result = await client.messaging.mark_thread_as_read(thread_guid)
        return {"success": True, "thread_guid": thread_guid, "result": result}

    @app.tool()
    async def lodgify_archive_thread(thread_guid: str) -> dict[str, Any]:
        """Archive a conversation thread."""
        client = ensure_write_allowed("lodgify_archive_thread", "Archive thread")
        result = await client.messaging.archive_thread(thread_guid)
        return {"success": True, "thread_guid": thread_guid, "result": result}
