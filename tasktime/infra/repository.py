from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Callable
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tasktime.config import SETTINGS
from tasktime.domain.entities import Task
from tasktime.domain.enums import Meridiem, Priority, TimeUnit
from tasktime.domain.errors import StorageUnavailable
from tasktime.domain.timeutils import normalize_date
from tasktime.domain.validation import parse_positive_int

from .db import SessionLocal
from .models import KeyValueModel

logger = logging.getLogger(__name__)


def new_task_id() -> str:
    return uuid.uuid4().hex


def _to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "body": task.body,
        "priority": task.priority.value,
        "status": task.status,
        "date": task.date.isoformat() if task.date else None,
        "timeStart": task.time_start,
        "anteMeridiem": task.ante_meridiem.value,
        "estimatedTime": task.estimated_time,
        "timeUnit": task.time_unit.value,
        "timeSpent": task.time_spent,
    }


def _to_entity(record: dict[str, Any]) -> Task:
    hour = parse_positive_int(record.get("timeStart"))
    spent = record.get("timeSpent") or 0
    return Task(
        id=str(record.get("id") or new_task_id()),
        title=str(record.get("title") or ""),
        body=str(record.get("body") or ""),
        priority=_enum_or_default(Priority, record.get("priority"), Priority.LOW),
        status=str(record.get("status") or ""),
        date=_parse_stored_date(record.get("date")),
        time_start=hour if hour is not None and hour <= 12 else None,
        ante_meridiem=_enum_or_default(Meridiem, record.get("anteMeridiem"), Meridiem.AM),
        estimated_time=str(record.get("estimatedTime") or ""),
        time_unit=_enum_or_default(TimeUnit, record.get("timeUnit"), TimeUnit.HOURS),
        time_spent=int(spent) if isinstance(spent, (int, float)) and spent > 0 else 0,
    )


def dumps_tasks(tasks: list[Task]) -> str:
    return json.dumps([_to_record(task) for task in tasks], ensure_ascii=False)


def loads_tasks(raw: str) -> list[Task]:
    """Decode a stored task list, filling in fields older records lack."""
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise StorageUnavailable(f"Stored task list is not valid JSON: {exc}") from exc
    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        raise StorageUnavailable("Stored task list must be a JSON array of objects")
    return [_to_entity(item) for item in payload]


class TaskRepository:
    """Keeps the whole task list as one JSON value under a single key."""

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        key: str = SETTINGS.storage_key,
    ) -> None:
        self._session_factory = session_factory
        self._key = key

    def load(self) -> list[Task]:
        try:
            with self._session_factory() as session:
                row = session.get(KeyValueModel, self._key)
                raw = row.value if row else None
        except SQLAlchemyError as exc:
            raise StorageUnavailable(f"Cannot read task store: {exc}") from exc

        if not raw:
            logger.info("Task store %r is empty", self._key)
            return []
        tasks = loads_tasks(raw)
        logger.info("Loaded %d tasks from %r", len(tasks), self._key)
        return tasks

    def save(self, tasks: list[Task]) -> None:
        value = dumps_tasks(tasks)
        try:
            with self._session_factory() as session:
                row = session.get(KeyValueModel, self._key)
                if row is None:
                    session.add(KeyValueModel(key=self._key, value=value))
                else:
                    row.value = value
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageUnavailable(f"Cannot write task store: {exc}") from exc
        logger.debug("Saved %d tasks to %r", len(tasks), self._key)


def _enum_or_default(enum_cls, value: Any, default):
    if isinstance(value, str):
        for member in enum_cls:
            if member.value.lower() == value.strip().lower():
                return member
    return default


def _parse_stored_date(value: Any):
    if not value or not isinstance(value, str):
        return None
    try:
        return normalize_date(value)
    except ValueError:
        logger.warning("Ignoring unreadable task date %r", value)
        return None
