from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import QDate, Qt
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QComboBox,
    QDateEdit,
    QFileDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidgetItem,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QSizePolicy,
    QSpinBox,
    QSplitter,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from tasktime.domain.entities import Task
from tasktime.domain.enums import Meridiem, Priority, TimeUnit
from tasktime.domain.errors import ScheduleExhausted, StorageUnavailable, TaskError, ValidationError
from tasktime.domain.filters import TaskFilters
from tasktime.domain.timeutils import format_duration
from tasktime.infra.repository import TaskRepository
from tasktime.services.task_service import TaskService

from .dialogs import TimeTrackerDialog, WeeklyOverviewDialog
from .widgets import (
    PRIORITY_OPTIONS,
    TaskItemContainer,
    TaskItemWidget,
    TaskListWidget,
    Toast,
)

PRIORITY_FILTERS = [("All priorities", None), *PRIORITY_OPTIONS]

UNIT_OPTIONS = [
    ("Minute(s)", TimeUnit.MINUTES),
    ("Hour(s)", TimeUnit.HOURS),
]

FIELD_LABELS = {
    "title": "Title",
    "body": "Body",
    "priority": "Priority",
    "date": "Date",
    "time_start": "Hour",
    "ante_meridiem": "AM/PM",
    "estimated_time": "Estimated time",
    "time_unit": "Time unit",
    "time_spent": "Time spent",
}


class MainWindow(QWidget):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Tasktime")
        self.resize(1180, 720)

        self.service = TaskService(TaskRepository())

        main_layout = QHBoxLayout(self)
        main_layout.setContentsMargins(12, 12, 12, 12)

        splitter = QSplitter(Qt.Horizontal)
        main_layout.addWidget(splitter)

        self.center = self._build_center()
        self.detail = self._build_detail_panel()

        splitter.addWidget(self.center)
        splitter.addWidget(self.detail)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 2)
        splitter.setSizes([700, 480])

        self.toast = Toast(self)
        self.current_task_id: str | None = None

        try:
            self.service.load()
        except StorageUnavailable as exc:
            QMessageBox.critical(self, "Storage error", f"Could not load saved tasks.\n{exc}")

        self.refresh_tasks()

        QShortcut(QKeySequence("Ctrl+N"), self, self.new_task)
        QShortcut(QKeySequence("Ctrl+S"), self, self.save_task)

    def _build_center(self) -> QWidget:
        frame = QFrame()
        frame.setObjectName("CenterPanel")
        layout = QVBoxLayout(frame)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(12)

        header = QHBoxLayout()
        header_title = QLabel("My tasks")
        header_title.setProperty("class", "panel-title")
        self.stats_label = QLabel("")
        self.stats_label.setProperty("class", "stats-badge")
        header.addWidget(header_title)
        header.addStretch()
        header.addWidget(self.stats_label)

        action_bar = QFrame()
        action_bar.setObjectName("ActionBar")
        action_layout = QVBoxLayout(action_bar)
        action_layout.setContentsMargins(12, 10, 12, 10)
        action_layout.setSpacing(8)

        primary_row = QHBoxLayout()
        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search by title")
        self.search_input.setMinimumWidth(220)
        self.search_input.textChanged.connect(self.refresh_tasks)

        self.priority_filter = QComboBox()
        for label, value in PRIORITY_FILTERS:
            self.priority_filter.addItem(label, value.value if value else None)
        self.priority_filter.currentIndexChanged.connect(self.refresh_tasks)

        add_button = QPushButton("Add new task")
        add_button.clicked.connect(self.new_task)

        primary_row.addWidget(self.search_input, 1)
        primary_row.addWidget(self.priority_filter)
        primary_row.addWidget(add_button)

        secondary_row = QHBoxLayout()
        overview_button = QPushButton("Weekly overview")
        overview_button.setProperty("variant", "secondary")
        overview_button.clicked.connect(self.open_overview)

        tracker_button = QPushButton("Track time")
        tracker_button.setProperty("variant", "secondary")
        tracker_button.clicked.connect(self.open_tracker)

        export_button = QPushButton("Export JSON")
        export_button.setProperty("variant", "ghost")
        export_button.clicked.connect(self.export_json)

        import_button = QPushButton("Import JSON")
        import_button.setProperty("variant", "ghost")
        import_button.clicked.connect(self.import_json)

        secondary_row.addWidget(overview_button)
        secondary_row.addWidget(tracker_button)
        secondary_row.addWidget(export_button)
        secondary_row.addWidget(import_button)
        secondary_row.addStretch()

        action_layout.addLayout(primary_row)
        action_layout.addLayout(secondary_row)

        self.task_list = TaskListWidget()
        self.task_list.setObjectName("TaskList")
        self.task_list.setSpacing(10)
        self.task_list.currentItemChanged.connect(self.on_task_selected)

        layout.addLayout(header)
        layout.addWidget(action_bar)
        layout.addWidget(self.task_list)

        return frame

    def _build_detail_panel(self) -> QWidget:
        frame = QFrame()
        frame.setObjectName("DetailPanel")
        frame_layout = QVBoxLayout(frame)
        frame_layout.setContentsMargins(0, 0, 0, 0)
        frame_layout.setSpacing(0)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.NoFrame)
        scroll.setObjectName("DetailScroll")
        scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)

        content = QWidget()
        content_layout = QVBoxLayout(content)
        content_layout.setContentsMargins(12, 12, 12, 12)
        content_layout.setSpacing(8)

        self.form_title = QLabel("New task")
        self.form_title.setProperty("class", "panel-title")

        self.title_input = QLineEdit()
        self.title_input.setPlaceholderText("Enter task title")

        self.body_input = QTextEdit()
        self.body_input.setObjectName("BodyInput")
        self.body_input.setPlaceholderText("Enter task description")
        self.body_input.setMinimumHeight(120)
        self.body_input.setMaximumHeight(140)

        self.priority_combo = QComboBox()
        for label, value in PRIORITY_OPTIONS:
            self.priority_combo.addItem(label, value.value)

        self.status_input = QLineEdit()
        self.status_input.setPlaceholderText("Status (optional)")

        self.date_input = QDateEdit()
        self.date_input.setCalendarPopup(True)
        self.date_input.setDate(QDate.currentDate())

        self.hour_combo = QComboBox()
        for hour in range(12, 0, -1):
            self.hour_combo.addItem(str(hour), hour)

        self.meridiem_combo = QComboBox()
        for meridiem in Meridiem:
            self.meridiem_combo.addItem(meridiem.value, meridiem.value)

        when_row = QHBoxLayout()
        when_row.setSpacing(8)
        when_row.addWidget(self.date_input, 1)
        when_row.addWidget(self.hour_combo)
        when_row.addWidget(self.meridiem_combo)

        self.estimate_input = QSpinBox()
        self.estimate_input.setRange(1, 10_000)
        self.estimate_input.setValue(1)

        self.unit_combo = QComboBox()
        for label, value in UNIT_OPTIONS:
            self.unit_combo.addItem(label, value.value)

        estimate_row = QHBoxLayout()
        estimate_row.setSpacing(8)
        estimate_row.addWidget(self.estimate_input, 1)
        estimate_row.addWidget(self.unit_combo)

        self.spent_label = QLabel("Time spent: 0m")
        self.spent_label.setProperty("class", "stats")

        self.save_button = QPushButton("Save")
        self.save_button.clicked.connect(self.save_task)

        self.delete_button = QPushButton("Delete")
        self.delete_button.setProperty("variant", "danger")
        self.delete_button.clicked.connect(self.delete_task)

        content_layout.addWidget(self.form_title)
        content_layout.addWidget(QLabel("Title*"))
        content_layout.addWidget(self.title_input)
        content_layout.addWidget(QLabel("Body*"))
        content_layout.addWidget(self.body_input)
        content_layout.addWidget(QLabel("Priority*"))
        content_layout.addWidget(self.priority_combo)
        content_layout.addWidget(QLabel("Status"))
        content_layout.addWidget(self.status_input)
        content_layout.addWidget(QLabel("Date*"))
        content_layout.addLayout(when_row)
        content_layout.addWidget(QLabel("Estimated time*"))
        content_layout.addLayout(estimate_row)
        content_layout.addWidget(self.spent_label)

        actions = QHBoxLayout()
        actions.setSpacing(8)
        self.save_button.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        self.delete_button.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        actions.addWidget(self.save_button, 1)
        actions.addWidget(self.delete_button, 1)
        content_layout.addLayout(actions)
        content_layout.addStretch()

        scroll.setWidget(content)
        frame_layout.addWidget(scroll)

        return frame

    def refresh_tasks(self) -> None:
        search = self.search_input.text().strip()
        filters = TaskFilters(
            search=search or None,
            priority=_priority_or_none(self.priority_filter.currentData()),
        )
        rows = self.service.list_tasks(filters)
        selected_id = self.current_task_id

        self.task_list.blockSignals(True)
        self.task_list.clear()
        selected_row = -1
        for position, row in enumerate(rows):
            item = QListWidgetItem()
            item.setData(Qt.UserRole, row.task.id)
            widget = TaskItemContainer(TaskItemWidget(row.task))
            self.task_list.addItem(item)
            self.task_list.setItemWidget(item, widget)
            item.setSizeHint(widget.sizeHint())
            if row.task.id == selected_id:
                selected_row = position
        self.task_list.blockSignals(False)

        overview = self.service.weekly_overview()
        self.stats_label.setText(
            f"Showing {len(rows)} of {len(self.service.get_all())} • "
            f"This week: {overview.estimated_label} planned / {overview.actual_label} spent"
        )

        if selected_row >= 0:
            self.task_list.setCurrentRow(selected_row)
        else:
            self.current_task_id = None
            self.clear_form()
        self.task_list.sync_item_sizes()

    def on_task_selected(
        self,
        current: QListWidgetItem,
        previous: QListWidgetItem | None = None,
    ) -> None:
        if previous:
            self._set_task_item_selected(previous, False)
        if not current:
            return
        self._set_task_item_selected(current, True)
        task = self.service.get_task(current.data(Qt.UserRole))
        if task:
            self.current_task_id = task.id
            self.populate_form(task)

    def _set_task_item_selected(self, item: QListWidgetItem, selected: bool) -> None:
        widget = self.task_list.itemWidget(item)
        if hasattr(widget, "set_selected"):
            widget.set_selected(selected)

    def populate_form(self, task: Task) -> None:
        self.form_title.setText("Edit task")
        self.title_input.setText(task.title)
        self.body_input.setPlainText(task.body)
        self.status_input.setText(task.status)
        _select_data(self.priority_combo, task.priority.value)
        _select_data(self.meridiem_combo, task.ante_meridiem.value)
        _select_data(self.unit_combo, task.time_unit.value)
        if task.time_start is not None:
            _select_data(self.hour_combo, task.time_start)
        if task.date:
            self.date_input.setDate(QDate(task.date.year, task.date.month, task.date.day))
        if task.estimated_time.isdigit():
            self.estimate_input.setValue(int(task.estimated_time))
        self.spent_label.setText(f"Time spent: {format_duration(task.time_spent)}")
        self.delete_button.setEnabled(True)

    def clear_form(self) -> None:
        self.form_title.setText("New task")
        self.title_input.clear()
        self.body_input.clear()
        self.status_input.clear()
        self.priority_combo.setCurrentIndex(0)
        self.date_input.setDate(QDate.currentDate())
        self.hour_combo.setCurrentIndex(self.hour_combo.findData(9))
        self.meridiem_combo.setCurrentIndex(0)
        self.estimate_input.setValue(1)
        self.unit_combo.setCurrentIndex(self.unit_combo.findData(TimeUnit.HOURS.value))
        self.spent_label.setText("Time spent: 0m")
        self.delete_button.setEnabled(False)

    def new_task(self) -> None:
        self.current_task_id = None
        self.task_list.clearSelection()
        self.clear_form()
        self.title_input.setFocus()

    def save_task(self) -> None:
        data = {
            "title": self.title_input.text(),
            "body": self.body_input.toPlainText(),
            "priority": self.priority_combo.currentData(),
            "status": self.status_input.text(),
            "date": self.date_input.date().toPython(),
            "time_start": self.hour_combo.currentData(),
            "ante_meridiem": self.meridiem_combo.currentData(),
            "estimated_time": str(self.estimate_input.value()),
            "time_unit": self.unit_combo.currentData(),
        }

        creating = self.current_task_id is None
        try:
            if creating:
                result = self.service.create_task(data)
            else:
                result = self.service.update_task(self.current_task_id, data)
        except ValidationError as exc:
            label = FIELD_LABELS.get(exc.field, exc.field)
            QMessageBox.warning(self, "Check the form", f"{label} {exc.message}.")
            return
        except ScheduleExhausted as exc:
            QMessageBox.warning(
                self,
                "Day is full",
                f"Every hour on {exc.date.strftime('%d.%m.%Y')} is taken. Pick another date.",
            )
            return
        except StorageUnavailable as exc:
            self._report_storage_error(exc)
            self.refresh_tasks()
            return

        self.current_task_id = result.task.id
        self.refresh_tasks()

        if result.conflicted:
            self.toast.show_message(
                "Task saved but moved to the nearest free hour due to a conflict.",
                "warning",
            )
        elif creating:
            self.toast.show_message("Successfully added a new task.", "success")
        else:
            self.toast.show_message("Task updated successfully.", "info")

    def delete_task(self) -> None:
        if self.current_task_id is None:
            return
        confirm = QMessageBox.question(
            self,
            "Confirm",
            "Delete this task?",
        )
        if confirm != QMessageBox.Yes:
            return
        try:
            self.service.delete_task(self.current_task_id)
        except StorageUnavailable as exc:
            self._report_storage_error(exc)
            self.current_task_id = None
            self.refresh_tasks()
            return
        except TaskError as exc:
            QMessageBox.warning(self, "Error", str(exc))
            return
        self.current_task_id = None
        self.refresh_tasks()
        self.toast.show_message("Successfully deleted a task.", "danger")

    def open_overview(self) -> None:
        dialog = WeeklyOverviewDialog(self.service.weekly_overview(), self)
        dialog.exec()

    def open_tracker(self) -> None:
        if self.current_task_id is None:
            QMessageBox.information(self, "Select a task", "Select a task to track time for.")
            return
        task = self.service.get_task(self.current_task_id)
        if task is None:
            return
        dialog = TimeTrackerDialog(task.title, lambda ms: self._log_time(task.id, ms), self)
        dialog.exec()

    def _log_time(self, task_id: str, elapsed_ms: int) -> None:
        try:
            self.service.log_time(task_id, elapsed_ms)
        except StorageUnavailable as exc:
            self._report_storage_error(exc)
            self.refresh_tasks()
            return
        except TaskError as exc:
            QMessageBox.warning(self, "Error", str(exc))
            return
        self.refresh_tasks()
        self.toast.show_message(f"Logged {format_duration(elapsed_ms)}.", "info")

    def export_json(self) -> None:
        path, _ = QFileDialog.getSaveFileName(
            self,
            "Export tasks",
            str(Path.home() / "tasks.json"),
            "JSON Files (*.json)",
        )
        if not path:
            return
        try:
            count = self.service.export_json(Path(path))
        except StorageUnavailable as exc:
            QMessageBox.critical(self, "Export failed", str(exc))
            return
        QMessageBox.information(self, "Done", f"Exported {count} task(s).")

    def import_json(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self,
            "Import tasks",
            str(Path.home()),
            "JSON Files (*.json)",
        )
        if not path:
            return
        try:
            summary = self.service.import_json(Path(path))
        except ValidationError as exc:
            if exc.field == "file":
                QMessageBox.warning(self, "Import failed", f"The file {exc.message}.")
                return
            label = FIELD_LABELS.get(exc.field, exc.field)
            QMessageBox.warning(self, "Import failed", f"An imported task is invalid: {label} {exc.message}.")
            return
        except ScheduleExhausted as exc:
            QMessageBox.warning(
                self,
                "Import failed",
                f"No free hour left on {exc.date.strftime('%d.%m.%Y')} for the imported tasks.",
            )
            return
        except StorageUnavailable as exc:
            self._report_storage_error(exc)
            self.refresh_tasks()
            return
        self.refresh_tasks()
        message = f"Imported {summary.imported} task(s)."
        if summary.adjusted:
            message += f" {summary.adjusted} moved to a free hour due to conflicts."
        QMessageBox.information(self, "Done", message)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        if self.service.pending_save:
            try:
                self.service.flush()
            except StorageUnavailable as exc:
                confirm = QMessageBox.question(
                    self,
                    "Unsaved changes",
                    f"Changes could not be saved:\n{exc}\n\nQuit anyway?",
                )
                if confirm != QMessageBox.Yes:
                    event.ignore()
                    return
        super().closeEvent(event)

    def _report_storage_error(self, exc: StorageUnavailable) -> None:
        QMessageBox.critical(
            self,
            "Storage error",
            f"The change is kept for this session but was not saved.\n{exc}",
        )


def _select_data(combo: QComboBox, value) -> None:
    index = combo.findData(value)
    if index >= 0:
        combo.setCurrentIndex(index)


def _priority_or_none(value: str | None) -> Priority | None:
    return Priority(value) if value else None
