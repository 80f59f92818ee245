from __future__ import annotations

from datetime import date, datetime

import pytest

from tasktime.domain.enums import Meridiem, Priority, TimeUnit
from tasktime.domain.errors import ValidationError
from tasktime.domain.validation import parse_positive_int, validate_task_data


def _data(**overrides) -> dict:
    data = {
        "title": "  Title ",
        "body": "Body",
        "priority": "HIGH",
        "date": datetime(2024, 6, 10, 15, 0),
        "time_start": "9",
        "ante_meridiem": "pm",
        "estimated_time": 3,
        "time_unit": "m",
    }
    data.update(overrides)
    return data


def test_normalizes_values() -> None:
    normalized = validate_task_data(_data())

    assert normalized["title"] == "Title"
    assert normalized["priority"] is Priority.HIGH
    assert normalized["date"] == date(2024, 6, 10)
    assert normalized["time_start"] == 9
    assert normalized["ante_meridiem"] is Meridiem.PM
    assert normalized["estimated_time"] == "3"
    assert normalized["time_unit"] is TimeUnit.MINUTES
    assert normalized["status"] == ""
    assert normalized["time_spent"] == 0


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"title": ""}, "title"),
        ({"body": None}, "body"),
        ({"priority": "urgent"}, "priority"),
        ({"estimated_time": "1.5"}, "estimated_time"),
        ({"estimated_time": "0"}, "estimated_time"),
        ({"estimated_time": "²"}, "estimated_time"),
        ({"time_start": "³"}, "time_start"),
        ({"time_start": 13}, "time_start"),
        ({"time_start": None}, "time_start"),
        ({"date": None}, "date"),
        ({"date": "someday"}, "date"),
        ({"ante_meridiem": "noon"}, "ante_meridiem"),
        ({"time_spent": -5}, "time_spent"),
    ],
)
def test_rejects_bad_field(overrides: dict, field: str) -> None:
    with pytest.raises(ValidationError) as exc_info:
        validate_task_data(_data(**overrides))

    assert exc_info.value.field == field


@pytest.mark.parametrize(
    ("value", "expected"),
    [("12", 12), (" 4 ", 4), (7, 7), ("0", None), (-1, None), ("x", None), ("²", None), ("+5", None), ("1_0", None), (False, None), (2.0, None)],
)
def test_parse_positive_int(value, expected) -> None:
    assert parse_positive_int(value) == expected
