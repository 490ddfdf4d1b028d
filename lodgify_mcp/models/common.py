"""
Common data models for the Lodgify MCP server.

Provides the base model and list envelope shared across the
Lodgify API domains.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LodgifyBaseModel(BaseModel):
    """Base model for all Lodgify entities."""

    model_config = ConfigDict(
        extra="allow",  # Allow extra fields from API responses
        populate_by_name=True,
        use_enum_values=True,
    )


class Pagination(LodgifyBaseModel):
    """Pagination information model."""

    limit: int
    offset: int
    total: int


class ListResponse(LodgifyBaseModel):
    """Normalized list envelope returned by list operations."""

    data: list[Any] = Field(default_factory=list)
    count: int | None = None
    pagination: Pagination | None = None


def normalize_list_response(result: Any) -> dict[str, Any]:
    """
    Normalize the list shapes the API returns into ``{"data", "count"}``.

    Bare arrays, ``{"data": [...]}`` and ``{"items": [...]}`` envelopes are
    accepted; any other single object is wrapped as a one-element list.
    """
    if isinstance(result, list):
        return {"data": result, "count": len(result)}

    if isinstance(result, dict):
        if isinstance(result.get("data"), list):
            normalized = dict(result)
            normalized.setdefault("count", len(result["data"]))
            return normalized
        if isinstance(result.get("items"), list):
            normalized = {
                "data": result["items"],
                "count": result.get("count") or len(result["items"]),
            }
            if result.get("pagination") is not None:
                normalized["pagination"] = result["pagination"]
            return normalized

    if result is None:
        return {"data": [], "count": 0}

    return {"data": [result], "count": 1}
