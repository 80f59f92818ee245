from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from .enums import Meridiem, Priority, TimeUnit


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    body: str
    priority: Priority
    status: str
    date: date | None
    time_start: int | None
    ante_meridiem: Meridiem
    estimated_time: str
    time_unit: TimeUnit
    time_spent: int = 0

    @property
    def slot(self) -> tuple[int, Meridiem] | None:
        if self.time_start is None:
            return None
        return self.time_start, self.ante_meridiem


@dataclass(frozen=True)
class TaskRow:
    """A task as shown in a filtered view, with its position in the full list."""

    task: Task
    original_index: int
