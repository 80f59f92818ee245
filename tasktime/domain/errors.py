from __future__ import annotations

from datetime import date


class TaskError(Exception):
    """Base class for failures reported by the task controller."""


class ValidationError(TaskError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class ScheduleExhausted(TaskError):
    def __init__(self, on_date: date) -> None:
        super().__init__(f"No free hour left on {on_date.isoformat()}")
        self.date = on_date


class StorageUnavailable(TaskError):
    pass


class TaskNotFound(TaskError):
    pass
