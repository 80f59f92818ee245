from __future__ import annotations

from enum import StrEnum
from typing import Any

from .enums import Meridiem, Priority, TimeUnit
from .errors import ValidationError
from .timeutils import normalize_date

REQUIRED_TEXT_FIELDS = ("title", "body")


def parse_positive_int(value: Any) -> int | None:
    """Return ``value`` as a positive int, or None when it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        text = value.strip()
        if not text.isdecimal():
            return None
        number = int(text)
        return number if number > 0 else None
    return None


def validate_task_data(data: dict) -> dict:
    """Check form data for a task and return it with typed values.

    Raises ValidationError naming the first offending field.
    """
    normalized = dict(data)

    for field in REQUIRED_TEXT_FIELDS:
        value = normalized.get(field)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(field, "is required")
        normalized[field] = value.strip()

    normalized["status"] = str(normalized.get("status") or "").strip()
    normalized["priority"] = _coerce_enum(Priority, "priority", normalized.get("priority", Priority.LOW))
    normalized["ante_meridiem"] = _coerce_enum(
        Meridiem, "ante_meridiem", normalized.get("ante_meridiem", Meridiem.AM)
    )
    normalized["time_unit"] = _coerce_enum(TimeUnit, "time_unit", normalized.get("time_unit", TimeUnit.HOURS))

    estimated = parse_positive_int(normalized.get("estimated_time"))
    if estimated is None:
        raise ValidationError("estimated_time", "must be a positive integer")
    normalized["estimated_time"] = str(estimated)

    hour = parse_positive_int(normalized.get("time_start"))
    if hour is None or hour > 12:
        raise ValidationError("time_start", "must be an hour between 1 and 12")
    normalized["time_start"] = hour

    raw_date = normalized.get("date")
    if raw_date in (None, ""):
        raise ValidationError("date", "is required")
    try:
        normalized["date"] = normalize_date(raw_date)
    except (AttributeError, TypeError, ValueError) as exc:
        raise ValidationError("date", f"is not a valid date ({exc})") from exc

    spent = normalized.get("time_spent", 0) or 0
    if isinstance(spent, bool) or not isinstance(spent, int) or spent < 0:
        raise ValidationError("time_spent", "must be a non-negative number of milliseconds")
    normalized["time_spent"] = spent

    return normalized


def _coerce_enum(enum_cls: type[StrEnum], field: str, value: Any) -> StrEnum:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        for member in enum_cls:
            if member.value.lower() == value.strip().lower():
                return member
    raise ValidationError(field, f"unknown value {value!r}")
