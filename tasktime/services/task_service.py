from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from pathlib import Path
from typing import Protocol

from tasktime.domain.entities import Task, TaskRow
from tasktime.domain.errors import StorageUnavailable, TaskNotFound, ValidationError
from tasktime.domain.filters import TaskFilters
from tasktime.domain.validation import validate_task_data
from tasktime.infra.repository import dumps_tasks, loads_tasks, new_task_id

from .scheduling import resolve_slot
from .weekly_overview import WeeklyOverview, aggregate

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "title",
    "body",
    "priority",
    "status",
    "date",
    "time_start",
    "ante_meridiem",
    "estimated_time",
    "time_unit",
    "time_spent",
)


class TaskStore(Protocol):
    def load(self) -> list[Task]: ...

    def save(self, tasks: list[Task]) -> None: ...


@dataclass(frozen=True)
class SaveResult:
    task: Task
    conflicted: bool


@dataclass(frozen=True)
class ImportSummary:
    imported: int
    adjusted: int


class TaskService:
    """Owns the task list for the session and writes every change through to the store."""

    def __init__(self, repo: TaskStore) -> None:
        self._repo = repo
        self._tasks: list[Task] = []
        self._pending_save = False

    @property
    def pending_save(self) -> bool:
        return self._pending_save

    def load(self) -> list[Task]:
        self._tasks = self._repo.load()
        self._pending_save = False
        return self.get_all()

    def get_all(self) -> list[Task]:
        return list(self._tasks)

    def get_task(self, task_id: str) -> Task | None:
        return next((task for task in self._tasks if task.id == task_id), None)

    def task_at(self, index: int) -> Task:
        if not 0 <= index < len(self._tasks):
            raise TaskNotFound(f"No task at position {index}")
        return self._tasks[index]

    def list_tasks(self, filters: TaskFilters) -> list[TaskRow]:
        rows = [TaskRow(task=task, original_index=index) for index, task in enumerate(self._tasks)]
        return _apply_filters(rows, filters)

    def create_task(self, data: dict) -> SaveResult:
        normalized = validate_task_data(data)
        resolution = resolve_slot(
            self._tasks,
            normalized["date"],
            normalized["time_start"],
            normalized["ante_meridiem"],
        )
        normalized["time_start"] = resolution.hour
        normalized["ante_meridiem"] = resolution.meridiem

        task = Task(id=new_task_id(), **_editable(normalized))
        self._commit([*self._tasks, task])
        logger.info("Task created: %s (conflicted=%s)", task.id, resolution.conflicted)
        return SaveResult(task=task, conflicted=resolution.conflicted)

    def update_task(self, task_id: str, data: dict) -> SaveResult:
        index = self._index_of(task_id)
        current = self._tasks[index]
        merged = {field: getattr(current, field) for field in EDITABLE_FIELDS}
        merged.update({key: value for key, value in data.items() if key in EDITABLE_FIELDS})
        normalized = validate_task_data(merged)

        resolution = resolve_slot(
            self._tasks,
            normalized["date"],
            normalized["time_start"],
            normalized["ante_meridiem"],
            ignore_id=task_id,
        )
        normalized["time_start"] = resolution.hour
        normalized["ante_meridiem"] = resolution.meridiem

        updated = replace(current, **_editable(normalized))
        tasks = list(self._tasks)
        tasks[index] = updated
        self._commit(tasks)
        logger.info("Task updated: %s (conflicted=%s)", task_id, resolution.conflicted)
        return SaveResult(task=updated, conflicted=resolution.conflicted)

    def update_task_at(self, index: int, data: dict) -> SaveResult:
        return self.update_task(self.task_at(index).id, data)

    def delete_task(self, task_id: str) -> Task:
        index = self._index_of(task_id)
        tasks = list(self._tasks)
        removed = tasks.pop(index)
        self._commit(tasks)
        logger.info("Task deleted: %s", task_id)
        return removed

    def remove_task_at(self, index: int) -> Task:
        return self.delete_task(self.task_at(index).id)

    def log_time(self, task_id: str, elapsed_ms: int) -> Task:
        if isinstance(elapsed_ms, bool) or not isinstance(elapsed_ms, int) or elapsed_ms <= 0:
            raise ValidationError("time_spent", "logged time must be a positive number of milliseconds")
        index = self._index_of(task_id)
        updated = replace(self._tasks[index], time_spent=self._tasks[index].time_spent + elapsed_ms)
        tasks = list(self._tasks)
        tasks[index] = updated
        self._commit(tasks)
        logger.info("Logged %d ms on task %s", elapsed_ms, task_id)
        return updated

    def weekly_overview(self, as_of: date | datetime | None = None) -> WeeklyOverview:
        return aggregate(self._tasks, as_of or date.today())

    def flush(self) -> None:
        if not self._pending_save:
            return
        self._commit(list(self._tasks))

    def export_json(self, path: Path) -> int:
        try:
            path.write_text(dumps_tasks(self._tasks), encoding="utf-8")
        except OSError as exc:
            raise StorageUnavailable(f"Cannot write {path}: {exc}") from exc
        return len(self._tasks)

    def import_json(self, path: Path) -> ImportSummary:
        """Append tasks from an exported file, moving any that collide to a free hour.

        Nothing is added unless every imported task passes validation and finds a slot.
        """
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageUnavailable(f"Cannot read {path}: {exc}") from exc

        try:
            incoming_tasks = loads_tasks(raw)
        except StorageUnavailable as exc:
            raise ValidationError("file", f"is not a task export ({exc})") from exc

        tasks = list(self._tasks)
        adjusted = 0
        for incoming in incoming_tasks:
            normalized = validate_task_data({field: getattr(incoming, field) for field in EDITABLE_FIELDS})
            resolution = resolve_slot(
                tasks,
                normalized["date"],
                normalized["time_start"],
                normalized["ante_meridiem"],
            )
            normalized["time_start"] = resolution.hour
            normalized["ante_meridiem"] = resolution.meridiem
            adjusted += int(resolution.conflicted)
            tasks.append(Task(id=new_task_id(), **_editable(normalized)))

        imported = len(tasks) - len(self._tasks)
        self._commit(tasks)
        logger.info("Imported %d tasks from %s (%d adjusted)", imported, path, adjusted)
        return ImportSummary(imported=imported, adjusted=adjusted)

    def _index_of(self, task_id: str) -> int:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        raise TaskNotFound(f"Unknown task {task_id!r}")

    def _commit(self, tasks: list[Task]) -> None:
        self._tasks = tasks
        try:
            self._repo.save(tasks)
        except StorageUnavailable:
            self._pending_save = True
            logger.exception("Task list kept in memory only; save failed")
            raise
        self._pending_save = False


def _editable(normalized: dict) -> dict:
    return {field: normalized[field] for field in EDITABLE_FIELDS}


def _apply_filters(rows: list[TaskRow], filters: TaskFilters) -> list[TaskRow]:
    if filters.priority is not None:
        rows = [row for row in rows if row.task.priority == filters.priority]

    if filters.search:
        needle = filters.search.lower()
        rows = [row for row in rows if needle in row.task.title.lower()]

    return rows
