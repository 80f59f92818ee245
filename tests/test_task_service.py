from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from tasktime.domain.entities import Task
from tasktime.domain.enums import Meridiem, Priority, TimeUnit
from tasktime.domain.errors import ScheduleExhausted, StorageUnavailable, TaskNotFound, ValidationError
from tasktime.domain.filters import TaskFilters
from tasktime.services.task_service import TaskService


class FakeRepo:
    def __init__(self, tasks: list[Task] | None = None) -> None:
        self.tasks: list[Task] = list(tasks or [])
        self.saves = 0
        self.fail = False

    def load(self) -> list[Task]:
        return list(self.tasks)

    def save(self, tasks: list[Task]) -> None:
        if self.fail:
            raise StorageUnavailable("disk full")
        self.tasks = list(tasks)
        self.saves += 1


def _data(**overrides) -> dict:
    data = {
        "title": "Write report",
        "body": "Quarterly numbers",
        "priority": "medium",
        "status": "",
        "date": date(2024, 6, 10),
        "time_start": 9,
        "ante_meridiem": "AM",
        "estimated_time": "2",
        "time_unit": "H",
    }
    data.update(overrides)
    return data


def _service(*tasks: Task) -> tuple[TaskService, FakeRepo]:
    repo = FakeRepo(list(tasks))
    service = TaskService(repo)
    service.load()
    return service, repo


def test_create_task_persists_and_keeps_free_slot() -> None:
    service, repo = _service()

    result = service.create_task(_data())

    assert result.conflicted is False
    assert result.task.time_start == 9
    assert result.task.ante_meridiem is Meridiem.AM
    assert result.task.priority is Priority.MEDIUM
    assert result.task.time_unit is TimeUnit.HOURS
    assert result.task.time_spent == 0
    assert repo.tasks == [result.task]


def test_create_task_moves_conflicting_slot() -> None:
    service, repo = _service()
    service.create_task(_data(time_start=9))
    service.create_task(_data(time_start=10))

    result = service.create_task(_data(title="Standup", time_start=9))

    assert result.conflicted is True
    assert (result.task.time_start, result.task.ante_meridiem) == (11, Meridiem.AM)
    assert len(repo.tasks) == 3


def test_create_task_rejects_invalid_data_without_saving() -> None:
    service, repo = _service()

    with pytest.raises(ValidationError) as exc_info:
        service.create_task(_data(estimated_time="abc"))

    assert exc_info.value.field == "estimated_time"
    assert service.get_all() == []
    assert repo.saves == 0


def test_create_task_on_full_day_raises_and_leaves_list() -> None:
    service, repo = _service()
    for meridiem in ("AM", "PM"):
        for hour in range(1, 13):
            service.create_task(_data(time_start=hour, ante_meridiem=meridiem))
    saves = repo.saves

    with pytest.raises(ScheduleExhausted):
        service.create_task(_data())

    assert len(service.get_all()) == 24
    assert repo.saves == saves


def test_update_task_keeps_own_slot() -> None:
    service, _ = _service()
    created = service.create_task(_data()).task

    result = service.update_task(created.id, {"title": "Write final report"})

    assert result.conflicted is False
    assert result.task.id == created.id
    assert result.task.title == "Write final report"
    assert result.task.time_start == 9


def test_update_task_into_taken_slot_is_adjusted() -> None:
    service, _ = _service()
    service.create_task(_data(time_start=3, ante_meridiem="PM"))
    other = service.create_task(_data(time_start=9)).task

    result = service.update_task(other.id, {"time_start": 3, "ante_meridiem": "PM"})

    assert result.conflicted is True
    assert (result.task.time_start, result.task.ante_meridiem) == (4, Meridiem.PM)


def test_update_task_with_blank_title_changes_nothing() -> None:
    service, repo = _service()
    created = service.create_task(_data()).task

    with pytest.raises(ValidationError):
        service.update_task(created.id, {"title": "   "})

    assert service.get_task(created.id) == created
    assert repo.tasks == [created]


def test_update_unknown_task_raises() -> None:
    service, _ = _service()

    with pytest.raises(TaskNotFound):
        service.update_task("missing", {"title": "x"})


def test_delete_by_index_recomputes_view_indices() -> None:
    service, repo = _service()
    first = service.create_task(_data(title="First", time_start=1)).task
    service.create_task(_data(title="Second", time_start=2))
    third = service.create_task(_data(title="Third", time_start=3)).task

    removed = service.remove_task_at(1)

    rows = service.list_tasks(TaskFilters())
    assert removed.title == "Second"
    assert [row.task.id for row in rows] == [first.id, third.id]
    assert [row.original_index for row in rows] == [0, 1]
    assert len(repo.tasks) == 2


def test_remove_task_at_out_of_range() -> None:
    service, _ = _service()

    with pytest.raises(TaskNotFound):
        service.remove_task_at(0)


def test_update_task_at_uses_current_position() -> None:
    service, _ = _service()
    service.create_task(_data(title="First", time_start=1))
    second = service.create_task(_data(title="Second", time_start=2)).task

    result = service.update_task_at(1, {"status": "in progress"})

    assert result.task.id == second.id
    assert result.task.status == "in progress"


def test_list_tasks_filters_by_title_and_priority() -> None:
    service, _ = _service()
    service.create_task(_data(title="Buy milk", priority="low", time_start=1))
    service.create_task(_data(title="Fix the BUILD", priority="high", time_start=2))
    service.create_task(_data(title="Build shed", priority="low", time_start=3))

    by_title = service.list_tasks(TaskFilters(search="build"))
    by_both = service.list_tasks(TaskFilters(search="build", priority=Priority.LOW))

    assert [row.task.title for row in by_title] == ["Fix the BUILD", "Build shed"]
    assert [(row.task.title, row.original_index) for row in by_both] == [("Build shed", 2)]


def test_storage_failure_keeps_change_in_memory_until_flush() -> None:
    service, repo = _service()
    repo.fail = True

    with pytest.raises(StorageUnavailable):
        service.create_task(_data())

    assert len(service.get_all()) == 1
    assert service.pending_save is True
    assert repo.tasks == []

    repo.fail = False
    service.flush()

    assert service.pending_save is False
    assert repo.tasks == service.get_all()


def test_log_time_accumulates() -> None:
    service, _ = _service()
    created = service.create_task(_data()).task

    service.log_time(created.id, 600_000)
    updated = service.log_time(created.id, 1_200_000)

    assert updated.time_spent == 1_800_000


def test_log_time_rejects_non_positive() -> None:
    service, _ = _service()
    created = service.create_task(_data()).task

    with pytest.raises(ValidationError):
        service.log_time(created.id, 0)


def test_weekly_overview_uses_loaded_tasks() -> None:
    base = Task(
        id="a",
        title="Plan",
        body="Plan the week",
        priority=Priority.LOW,
        status="",
        date=date(2024, 6, 9),
        time_start=9,
        ante_meridiem=Meridiem.AM,
        estimated_time="2",
        time_unit=TimeUnit.HOURS,
        time_spent=1_800_000,
    )
    service, _ = _service(base, replace(base, id="b", date=date(2024, 6, 2)))

    overview = service.weekly_overview(date(2024, 6, 12))

    assert overview.total_estimated_ms == 7_200_000
    assert overview.total_actual_ms == 1_800_000
    assert overview.task_count == 1


def test_export_then_import_appends_with_new_ids(tmp_path) -> None:
    service, _ = _service()
    original = service.create_task(_data()).task
    path = tmp_path / "tasks.json"

    assert service.export_json(path) == 1
    summary = service.import_json(path)

    tasks = service.get_all()
    assert summary.imported == 1
    assert summary.adjusted == 1
    assert len(tasks) == 2
    assert tasks[1].id != original.id
    assert (tasks[1].time_start, tasks[1].ante_meridiem) == (10, Meridiem.AM)


@pytest.mark.parametrize("content", ["{not json", '{"title": "x"}', "[1, 2]"])
def test_import_of_malformed_file_is_a_validation_error(tmp_path, content: str) -> None:
    service, repo = _service()
    service.create_task(_data())
    path = tmp_path / "tasks.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ValidationError) as exc_info:
        service.import_json(path)

    assert exc_info.value.field == "file"
    assert len(service.get_all()) == 1
    assert repo.saves == 1
    assert not service.pending_save
