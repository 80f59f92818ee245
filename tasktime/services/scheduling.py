from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date

from tasktime.domain.entities import Task
from tasktime.domain.enums import Meridiem
from tasktime.domain.errors import ScheduleExhausted
from tasktime.domain.timeutils import normalize_date

logger = logging.getLogger(__name__)

HOURS_PER_MERIDIEM = 12


@dataclass(frozen=True)
class SlotResolution:
    hour: int
    meridiem: Meridiem
    conflicted: bool


def resolve_slot(
    tasks: Iterable[Task],
    on_date: date,
    hour: int,
    meridiem: Meridiem | str,
    *,
    ignore_id: str | None = None,
) -> SlotResolution:
    """Pick the hour a task should occupy on ``on_date``.

    The requested slot is kept when free. Otherwise the next hours of the same
    meridiem are tried (12 wraps to 1), then every hour of the opposite
    meridiem starting from the requested hour number. Raises ScheduleExhausted
    when all 24 hourly slots of the day are taken.
    """
    meridiem = Meridiem(meridiem)
    occupied = occupied_slots(tasks, on_date, ignore_id=ignore_id)

    if (hour, meridiem) not in occupied:
        return SlotResolution(hour=hour, meridiem=meridiem, conflicted=False)

    for candidate in _search_order(hour, meridiem):
        if candidate not in occupied:
            logger.info(
                "Slot %s %s on %s taken, moved to %s %s",
                hour,
                meridiem.value,
                on_date,
                candidate[0],
                candidate[1].value,
            )
            return SlotResolution(hour=candidate[0], meridiem=candidate[1], conflicted=True)

    raise ScheduleExhausted(normalize_date(on_date))


def occupied_slots(
    tasks: Iterable[Task],
    on_date: date,
    *,
    ignore_id: str | None = None,
) -> set[tuple[int, Meridiem]]:
    day = normalize_date(on_date)
    occupied: set[tuple[int, Meridiem]] = set()
    for task in tasks:
        if ignore_id is not None and task.id == ignore_id:
            continue
        if task.date is None or task.slot is None:
            continue
        if normalize_date(task.date) == day:
            occupied.add(task.slot)
    return occupied


def _search_order(hour: int, meridiem: Meridiem) -> Iterator[tuple[int, Meridiem]]:
    current = hour
    for _ in range(HOURS_PER_MERIDIEM - 1):
        current = _next_hour(current)
        yield current, meridiem

    current = hour
    for _ in range(HOURS_PER_MERIDIEM):
        yield current, meridiem.opposite
        current = _next_hour(current)


def _next_hour(hour: int) -> int:
    return hour % HOURS_PER_MERIDIEM + 1
