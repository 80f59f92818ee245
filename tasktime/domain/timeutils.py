from __future__ import annotations

from datetime import date, datetime, timedelta

from .enums import Meridiem, TimeUnit

MS_PER_MINUTE = 60_000
MS_PER_HOUR = 3_600_000


def normalize_date(value: date | datetime | str) -> date:
    """Drop the time-of-day part and return the local calendar date.

    Strings are parsed as ISO 8601; a trailing ``Z`` is accepted, and aware
    timestamps are converted to local wall-clock time before truncation.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return date(value.year, value.month, value.day)


def start_of_week(value: date | datetime | str) -> date:
    day = normalize_date(value)
    # weekday(): Monday=0 .. Sunday=6; weeks here start on Sunday.
    return day - timedelta(days=(day.weekday() + 1) % 7)


def duration_to_ms(amount: int, unit: TimeUnit | str) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValueError(f"Duration must be a positive integer, got {amount!r}")
    if TimeUnit(unit) is TimeUnit.MINUTES:
        return amount * MS_PER_MINUTE
    return amount * MS_PER_HOUR


def format_duration(ms: int) -> str:
    if ms < 0:
        raise ValueError(f"Duration cannot be negative, got {ms!r}")
    total_minutes = int(ms) // MS_PER_MINUTE
    hours, minutes = divmod(total_minutes, 60)
    if hours and minutes:
        return f"{hours}h {minutes}m"
    if hours:
        return f"{hours}h"
    return f"{minutes}m"


def format_slot(hour: int, meridiem: Meridiem | str) -> str:
    return f"{hour}:00 {Meridiem(meridiem).value}"
