from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from tasktime.domain.entities import Task
from tasktime.domain.timeutils import duration_to_ms, format_duration, normalize_date, start_of_week
from tasktime.domain.validation import parse_positive_int

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeeklyOverview:
    week_start: date
    as_of: date
    total_estimated_ms: int
    total_actual_ms: int
    task_count: int

    @property
    def estimated_label(self) -> str:
        return format_duration(self.total_estimated_ms)

    @property
    def actual_label(self) -> str:
        return format_duration(self.total_actual_ms)


def aggregate(tasks: Iterable[Task], as_of: date | datetime) -> WeeklyOverview:
    """Sum estimated and logged time of tasks dated from Sunday through ``as_of``.

    Days later in the week are not counted even when tasks are scheduled there.
    """
    today = normalize_date(as_of)
    week_start = start_of_week(today)

    total_estimated = 0
    total_actual = 0
    count = 0
    for task in tasks:
        if task.date is None:
            continue
        task_date = normalize_date(task.date)
        if not week_start <= task_date <= today:
            continue

        amount = parse_positive_int(task.estimated_time)
        if amount is None:
            logger.debug("Task %s has unusable estimate %r", task.id, task.estimated_time)
        else:
            total_estimated += duration_to_ms(amount, task.time_unit)
        total_actual += task.time_spent or 0
        count += 1

    return WeeklyOverview(
        week_start=week_start,
        as_of=today,
        total_estimated_ms=total_estimated,
        total_actual_ms=total_actual,
        task_count=count,
    )
