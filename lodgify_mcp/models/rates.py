"""
Rate response models.

Rate endpoints are the only ones whose responses are validated strictly;
a response that does not match raises ``SerializationError`` in the rates
client.
"""

from datetime import datetime
from typing import Literal

from pydantic import Field

from lodgify_mcp.models.common import LodgifyBaseModel

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class DailyRateEntry(LodgifyBaseModel):
    date: str = Field(pattern=DATE_PATTERN)
    rate: float = Field(ge=0)
    currency: str | None = Field(None, min_length=3, max_length=3)
    min_stay: int | None = Field(None, ge=1)
    max_stay: int | None = Field(None, ge=1)
    available: bool | None = None
    room_type_id: int | None = Field(None, gt=0)
    property_id: int | None = Field(None, gt=0)


class DateRange(LodgifyBaseModel):
    from_: str = Field(alias="from", pattern=DATE_PATTERN)
    to: str = Field(pattern=DATE_PATTERN)


class DailyRatesResponse(LodgifyBaseModel):
    """Daily rates calendar."""

    property_id: int = Field(gt=0)
    room_type_id: int | None = Field(None, gt=0)
    currency: str = Field(min_length=3, max_length=3)
    rates: list[DailyRateEntry]
    total_entries: int | None = Field(None, ge=0)
    date_range: DateRange | None = None


class TaxSettings(LodgifyBaseModel):
    tax_rate: float = Field(ge=0, le=1)
    tax_inclusive: bool
    tax_name: str | None = None


class SeasonalRate(LodgifyBaseModel):
    name: str
    start_date: str = Field(pattern=DATE_PATTERN)
    end_date: str = Field(pattern=DATE_PATTERN)
    rate_multiplier: float = Field(ge=0)


class RateSettingsResponse(LodgifyBaseModel):
    """Rate settings for a property."""

    property_id: int = Field(gt=0)
    currency: str = Field(min_length=3, max_length=3)
    default_rate: float | None = Field(None, ge=0)
    minimum_stay: int | None = Field(None, ge=1)
    maximum_stay: int | None = Field(None, ge=1)
    check_in_days: list[int] | None = None
    check_out_days: list[int] | None = None
    rate_type: Literal["per_night", "per_week", "per_month"] | None = None
    pricing_model: Literal["base_rate", "dynamic", "seasonal"] | None = None
    tax_settings: TaxSettings | None = None
    seasonal_rates: list[SeasonalRate] | None = None
    last_updated: datetime | None = None


class RateOperationResponse(LodgifyBaseModel):
    """Result of creating or updating a rate."""

    rate_id: str | int
    property_id: int = Field(gt=0)
    room_type_id: int | None = Field(None, gt=0)
    from_: str = Field(alias="from", pattern=DATE_PATTERN)
    to: str = Field(pattern=DATE_PATTERN)
    rate: float = Field(ge=0)
    currency: str = Field(min_length=3, max_length=3)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    success: bool = True
    message: str | None = None
