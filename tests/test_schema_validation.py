"""
Schema validation tests for Lodgify MCP models.

Tests verify that all models inherit from LodgifyBaseModel with extra="allow"
configuration, ensuring API responses with additional fields are handled gracefully.
"""

import pytest
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from lodgify_mcp.models.common import (
    ListResponse,
    LodgifyBaseModel,
    Pagination,
    normalize_list_response,
)
from lodgify_mcp.models.rates import (
    DailyRateEntry,
    DailyRatesResponse,
    DateRange,
    RateOperationResponse,
    RateSettingsResponse,
    SeasonalRate,
    TaxSettings,
)

ALL_MODELS = [
    ListResponse,
    Pagination,
    DailyRateEntry,
    DailyRatesResponse,
    DateRange,
    RateOperationResponse,
    RateSettingsResponse,
    SeasonalRate,
    TaxSettings,
]


def get_extra_config(model_class: type[BaseModel]) -> str | None:
    """Get the 'extra' config value from a Pydantic model class."""
    model_config = getattr(model_class, "model_config", None)
    if model_config is not None and isinstance(model_config, dict):
        return model_config.get("extra")
    return None


class TestLodgifyBaseModel:
    """Tests for the LodgifyBaseModel base class."""

    def test_model_has_extra_allow(self):
        """Verify LodgifyBaseModel has extra='allow' in model_config."""
        assert get_extra_config(LodgifyBaseModel) == "allow"

    def test_extra_fields_stored_in_model(self):
        """Verify extra fields are accessible via __pydantic_extra__."""

        class TestModel(LodgifyBaseModel):
            name: str

        model = TestModel(name="test", custom_field="custom_value")
        assert model.__pydantic_extra__ is not None
        assert model.__pydantic_extra__.get("custom_field") == "custom_value"

    @pytest.mark.parametrize("model_class", ALL_MODELS)
    def test_all_models_inherit_base(self, model_class):
        assert issubclass(model_class, LodgifyBaseModel)
        assert get_extra_config(model_class) == "allow"


class TestRateModels:
    """Tests for the rate response models."""

    @pytest.fixture
    def daily_rates_data(self) -> dict:
        """Sample daily rates response with extra fields."""
        return {
            "property_id": 684855,
            "room_type_id": 751902,
            "currency": "USD",
            "rates": [
                {"date": "2025-11-24", "rate": 150.0, "min_stay": 2, "promo": "x"}
            ],
            "date_range": {"from": "2025-11-24", "to": "2025-11-30"},
            "calendarVersion": 3,
        }

    def test_daily_rates_keep_extra_fields(self, daily_rates_data):
        model = DailyRatesResponse.model_validate(daily_rates_data)

        assert model.rates[0].min_stay == 2
        assert model.date_range.from_ == "2025-11-24"
        assert model.model_dump(by_alias=True)["calendarVersion"] == 3

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("property_id", 0),
            ("currency", "EURO"),
            ("rates", [{"date": "24/11/2025", "rate": 10}]),
            ("rates", [{"date": "2025-11-24", "rate": -1}]),
        ],
    )
    def test_daily_rates_constraints(self, daily_rates_data, field, value):
        daily_rates_data[field] = value

        with pytest.raises(PydanticValidationError):
            DailyRatesResponse.model_validate(daily_rates_data)

    def test_rate_settings_literals(self):
        settings = RateSettingsResponse.model_validate(
            {
                "property_id": 1,
                "currency": "EUR",
                "rate_type": "per_week",
                "tax_settings": {"tax_rate": 0.21, "tax_inclusive": True},
            }
        )
        assert settings.tax_settings.tax_rate == 0.21

        with pytest.raises(PydanticValidationError):
            RateSettingsResponse.model_validate(
                {"property_id": 1, "currency": "EUR", "rate_type": "hourly"}
            )

    def test_tax_rate_is_a_fraction(self):
        with pytest.raises(PydanticValidationError):
            TaxSettings(tax_rate=21, tax_inclusive=False)

    def test_operation_accepts_alias_and_name(self):
        by_alias = RateOperationResponse.model_validate(
            {
                "rate_id": 1,
                "property_id": 1,
                "from": "2025-01-01",
                "to": "2025-01-02",
                "rate": 10,
                "currency": "EUR",
            }
        )
        by_name = RateOperationResponse(
            rate_id=1,
            property_id=1,
            from_="2025-01-01",
            to="2025-01-02",
            rate=10,
            currency="EUR",
        )

        assert by_alias.from_ == by_name.from_
        assert by_alias.success is True


class TestNormalizeListResponse:
    """Tests for list envelope normalization."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ([1, 2], {"data": [1, 2], "count": 2}),
            ({"data": [1], "count": 9}, {"data": [1], "count": 9}),
            ({"data": [1, 2]}, {"data": [1, 2], "count": 2}),
            ({"items": [1], "count": 4}, {"data": [1], "count": 4}),
            (None, {"data": [], "count": 0}),
            ({"id": 1}, {"data": [{"id": 1}], "count": 1}),
        ],
    )
    def test_shapes(self, raw, expected):
        assert normalize_list_response(raw) == expected

    def test_items_pagination_is_kept(self):
        result = normalize_list_response(
            {"items": [], "pagination": {"limit": 10, "offset": 0, "total": 0}}
        )

        assert result["pagination"] == {"limit": 10, "offset": 0, "total": 0}
        assert ListResponse.model_validate(result).pagination.limit == 10
