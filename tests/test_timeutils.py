from __future__ import annotations

from datetime import date, datetime

import pytest

from tasktime.domain.enums import Meridiem, TimeUnit
from tasktime.domain.timeutils import (
    duration_to_ms,
    format_duration,
    format_slot,
    normalize_date,
    start_of_week,
)


def test_normalize_date_drops_time_of_day() -> None:
    assert normalize_date(datetime(2024, 6, 12, 17, 45, 3, 999)) == date(2024, 6, 12)
    assert normalize_date(date(2024, 6, 12)) == date(2024, 6, 12)
    assert normalize_date("2024-06-12") == date(2024, 6, 12)


def test_normalize_date_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        normalize_date("next tuesday")


@pytest.mark.parametrize(
    ("day", "expected"),
    [
        (date(2024, 6, 9), date(2024, 6, 9)),
        (date(2024, 6, 12), date(2024, 6, 9)),
        (date(2024, 6, 15), date(2024, 6, 9)),
        (date(2024, 6, 16), date(2024, 6, 16)),
        (date(2024, 1, 2), date(2023, 12, 31)),
    ],
)
def test_start_of_week_is_previous_sunday(day: date, expected: date) -> None:
    assert start_of_week(day) == expected


def test_duration_to_ms() -> None:
    assert duration_to_ms(1, TimeUnit.HOURS) == 3_600_000
    assert duration_to_ms(90, "M") == 5_400_000


@pytest.mark.parametrize("amount", [0, -3, True])
def test_duration_to_ms_rejects_non_positive(amount) -> None:
    with pytest.raises(ValueError):
        duration_to_ms(amount, TimeUnit.MINUTES)


@pytest.mark.parametrize(
    ("ms", "label"),
    [
        (0, "0m"),
        (59_999, "0m"),
        (2_700_000, "45m"),
        (7_200_000, "2h"),
        (9_000_000, "2h 30m"),
        (90_061_000, "25h 1m"),
    ],
)
def test_format_duration(ms: int, label: str) -> None:
    assert format_duration(ms) == label


def test_format_duration_rejects_negative() -> None:
    with pytest.raises(ValueError):
        format_duration(-1)


def test_format_slot() -> None:
    assert format_slot(9, Meridiem.AM) == "9:00 AM"
