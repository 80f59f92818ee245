from __future__ import annotations

from enum import StrEnum


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Meridiem(StrEnum):
    AM = "AM"
    PM = "PM"

    @property
    def opposite(self) -> Meridiem:
        return Meridiem.PM if self is Meridiem.AM else Meridiem.AM


class TimeUnit(StrEnum):
    MINUTES = "M"
    HOURS = "H"
