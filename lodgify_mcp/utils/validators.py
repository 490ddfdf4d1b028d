"""
Input validation utilities for the Lodgify MCP server.

Provides common validation functions for identifiers, dates, guest counts
and URLs used by the domain modules and MCP tools.
"""

import re
from datetime import date, datetime
from typing import Any
from urllib.parse import urlparse

from lodgify_mcp.config.constants import (
    MAX_ADULTS,
    MAX_CHILDREN,
    MAX_INFANTS,
    MAX_PAGE_SIZE,
    MAX_PROPERTY_ID_LENGTH,
    MAX_TOTAL_GUESTS,
    MIN_ADULTS,
)
from lodgify_mcp.utils.exceptions import ValidationError

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_date_string(date_str: str, field: str = "date") -> date:
    """
    Validate and parse date string in YYYY-MM-DD format.

    Args:
        date_str: Date string to validate
        field: Field name used in the error message

    Returns:
        Parsed date object

    Raises:
        ValidationError: If date format is invalid
    """
    if not isinstance(date_str, str) or not _DATE_ONLY.match(date_str):
        raise ValidationError(
            f"Invalid {field} '{date_str}': Expected YYYY-MM-DD format"
        )
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError as e:
        raise ValidationError(f"Invalid {field} '{date_str}': {e}") from e


def validate_date_range(
    start: str,
    end: str,
    start_field: str = "start date",
    end_field: str = "end date",
    allow_same_day: bool = False,
) -> tuple[date, date]:
    """
    Validate an ordered pair of YYYY-MM-DD dates.

    Raises:
        ValidationError: If either date is malformed or the range is reversed
    """
    start_date = validate_date_string(start, start_field)
    end_date = validate_date_string(end, end_field)

    if end_date < start_date or (end_date == start_date and not allow_same_day):
        raise ValidationError(f"{end_field.capitalize()} must be after {start_field}")

    return start_date, end_date


def validate_identifier(value: Any, name: str = "ID") -> str:
    """
    Validate a resource identifier and return it as a string.

    Args:
        value: Identifier to validate
        name: Human readable identifier name

    Returns:
        Validated identifier

    Raises:
        ValidationError: If identifier is empty or too long
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{name} is required")

    identifier = str(value).strip()
    if len(identifier) > MAX_PROPERTY_ID_LENGTH:
        raise ValidationError(
            f"{name} cannot exceed {MAX_PROPERTY_ID_LENGTH} characters"
        )

    return identifier


def validate_pagination_params(page: int, page_size: int) -> tuple[int, int]:
    """
    Validate pagination parameters.

    Args:
        page: Page number
        page_size: Items per page

    Returns:
        Tuple of validated (page, page_size)

    Raises:
        ValidationError: If pagination parameters are invalid
    """
    if page < 1:
        raise ValidationError("Page number must be 1 or greater")

    if page_size < 1:
        raise ValidationError("Page size must be 1 or greater")

    if page_size > MAX_PAGE_SIZE:
        raise ValidationError(f"Page size cannot exceed {MAX_PAGE_SIZE}")

    return page, page_size


def validate_guest_count(adults: int, children: int = 0, infants: int = 0) -> int:
    """
    Validate a guest breakdown and return the total guest count.

    Raises:
        ValidationError: If any count is out of range
    """
    if adults < MIN_ADULTS or adults > MAX_ADULTS:
        raise ValidationError(
            f"Adults must be between {MIN_ADULTS} and {MAX_ADULTS}"
        )
    if children < 0 or children > MAX_CHILDREN:
        raise ValidationError(f"Children must be between 0 and {MAX_CHILDREN}")
    if infants < 0 or infants > MAX_INFANTS:
        raise ValidationError(f"Infants must be between 0 and {MAX_INFANTS}")

    total = adults + children + infants
    if total > MAX_TOTAL_GUESTS:
        raise ValidationError(f"Total guests cannot exceed {MAX_TOTAL_GUESTS}")

    return total


def validate_url(url: str) -> str:
    """
    Validate an absolute http(s) URL.

    Raises:
        ValidationError: If the URL is empty or not absolute http(s)
    """
    if not url:
        raise ValidationError("URL cannot be empty")

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"Invalid URL '{url}': must be an absolute http(s) URL")

    return url


def validate_required_fields(data: dict[str, Any], required_fields: list[str]) -> None:
    """
    Validate that required fields are present in data.

    Args:
        data: Data dictionary to validate
        required_fields: List of required field names

    Raises:
        ValidationError: If any required fields are missing
    """
    missing_fields = [field for field in required_fields if field not in data]

    if missing_fields:
        raise ValidationError(f"Missing required fields: {', '.join(missing_fields)}")

    empty_fields = [
        field
        for field in required_fields
        if not data.get(field) and data.get(field) != 0
    ]

    if empty_fields:
        raise ValidationError(f"Empty required fields: {', '.join(empty_fields)}")
