"""
Unit tests for input validation utilities.
"""

from datetime import date

import pytest

from lodgify_mcp.utils.exceptions import ValidationError
from lodgify_mcp.utils.validators import (
    validate_date_range,
    validate_date_string,
    validate_guest_count,
    validate_identifier,
    validate_pagination_params,
    validate_required_fields,
    validate_url,
)


class TestDateValidation:
    """Test suite for date validators."""

    def test_valid_date(self):
        assert validate_date_string("2025-02-28") == date(2025, 2, 28)

    @pytest.mark.parametrize(
        "value", ["2025-02-30", "2025-2-1", "01/02/2025", "", None, "2025-01-01T00:00"]
    )
    def test_invalid_date(self, value):
        with pytest.raises(ValidationError, match="Invalid date"):
            validate_date_string(value)

    def test_field_name_in_message(self):
        with pytest.raises(ValidationError, match="Invalid arrival"):
            validate_date_string("tomorrow", "arrival")

    def test_date_range(self):
        assert validate_date_range("2025-01-01", "2025-01-05") == (
            date(2025, 1, 1),
            date(2025, 1, 5),
        )

    def test_same_day_rejected_by_default(self):
        with pytest.raises(ValidationError, match="End date must be after start date"):
            validate_date_range("2025-01-01", "2025-01-01")

    def test_same_day_allowed(self):
        start, end = validate_date_range(
            "2025-01-01", "2025-01-01", allow_same_day=True
        )
        assert start == end

    def test_reversed_range_with_custom_fields(self):
        with pytest.raises(ValidationError, match="Departure must be after arrival"):
            validate_date_range(
                "2025-01-05",
                "2025-01-01",
                start_field="arrival",
                end_field="departure",
            )


class TestIdentifierValidation:
    """Test suite for identifier validation."""

    def test_int_identifier(self):
        assert validate_identifier(684855) == "684855"

    def test_strips_whitespace(self):
        assert validate_identifier("  abc ") == "abc"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing(self, value):
        with pytest.raises(ValidationError, match="Booking ID is required"):
            validate_identifier(value, "Booking ID")

    def test_too_long(self):
        with pytest.raises(ValidationError, match="cannot exceed"):
            validate_identifier("x" * 101)


class TestPaginationValidation:
    """Test suite for pagination parameter validation."""

    def test_valid(self):
        assert validate_pagination_params(1, 50) == (1, 50)

    @pytest.mark.parametrize(
        ("page", "size", "message"),
        [
            (0, 10, "Page number"),
            (1, 0, "Page size must be 1"),
            (1, 51, "Page size cannot exceed 50"),
        ],
    )
    def test_invalid(self, page, size, message):
        with pytest.raises(ValidationError, match=message):
            validate_pagination_params(page, size)


class TestGuestCountValidation:
    """Test suite for guest count validation."""

    def test_total(self):
        assert validate_guest_count(2, 1, 1) == 4

    @pytest.mark.parametrize(
        ("adults", "children", "infants", "message"),
        [
            (0, 0, 0, "Adults"),
            (2, -1, 0, "Children"),
            (2, 0, 21, "Infants"),
            (50, 50, 1, "Total guests"),
        ],
    )
    def test_invalid(self, adults, children, infants, message):
        with pytest.raises(ValidationError, match=message):
            validate_guest_count(adults, children, infants)


class TestUrlValidation:
    """Test suite for URL validation."""

    @pytest.mark.parametrize(
        "url", ["https://example.com/hook", "http://localhost:8080/x"]
    )
    def test_valid(self, url):
        assert validate_url(url) == url

    @pytest.mark.parametrize(
        "url", ["", "example.com", "ftp://example.com", "https://", "/path"]
    )
    def test_invalid(self, url):
        with pytest.raises(ValidationError):
            validate_url(url)


class TestRequiredFields:
    """Test suite for required field validation."""

    def test_all_present(self):
        validate_required_fields({"a": 1, "b": 0}, ["a", "b"])

    def test_missing(self):
        with pytest.raises(ValidationError, match="Missing required fields: b"):
            validate_required_fields({"a": 1}, ["a", "b"])

    def test_empty(self):
        with pytest.raises(ValidationError, match="Empty required fields: a"):
            validate_required_fields({"a": ""}, ["a"])
