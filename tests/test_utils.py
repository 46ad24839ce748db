"""
Tests for utility functions in roadmapper.utils module.
"""

from datetime import date, datetime

import pytest
from pydantic import ValidationError as PydanticValidationError

from roadmapper.models.payloads import DeliverableCreate, GoalCreate
from roadmapper.utils import (
    format_date,
    generate_id,
    generate_temp_id,
    is_temp_id,
    parse_date,
    validation_details,
)


class TestParseDate:
    """Tests for the parse_date function."""

    @pytest.mark.parametrize("text", [
        "2024-12-31",
        "2024/12/31",
        "31-12-2024",
        "31/12/2024",
        "20241231",
        "31 December 2024",
        "31 Dec 2024",
        "December 31, 2024",
        "Dec 31, 2024",
    ])
    def test_supported_formats(self, text):
        assert parse_date(text) == date(2024, 12, 31)

    def test_surrounding_whitespace(self):
        """Test whitespace around the value is ignored."""
        assert parse_date("  2024-03-01 ") == date(2024, 3, 1)

    def test_invalid_returns_none(self):
        assert parse_date("next tuesday") is None
        assert parse_date("2024-13-01") is None


class TestFormatDate:
    """Tests for the format_date function."""

    def test_date(self):
        assert format_date(date(2024, 2, 5)) == "2024-02-05"

    def test_datetime_drops_time(self):
        assert format_date(datetime(2024, 2, 5, 13, 30)) == "2024-02-05"


class TestIds:
    """Tests for permanent and placeholder ids."""

    def test_temp_ids_are_unique_and_marked(self):
        first, second = generate_temp_id(), generate_temp_id()

        assert first != second
        assert is_temp_id(first)
        assert first.startswith("temp-")

    def test_permanent_ids_are_not_temp(self):
        assert not is_temp_id(generate_id())
        assert not is_temp_id("page-1")


class TestValidationDetails:
    """Tests for flattening pydantic errors."""

    def test_field_errors(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            GoalCreate.model_validate({"desiredOutcome": "More", "priority": 0, "order": 0})

        fields = {d["field"] for d in validation_details(exc_info.value)}
        assert {"name", "priority"} <= fields

    def test_model_error_has_clean_message(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            DeliverableCreate.model_validate({
                "initiativeId": "i-1",
                "name": "Beta",
                "status": "planned",
                "order": 0,
                "startDate": "2024-02-01",
                "endDate": "2024-01-01",
            })

        (detail,) = validation_details(exc_info.value)
        assert detail == {"field": "", "message": "End date must not be before start date"}
