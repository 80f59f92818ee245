from __future__ import annotations

from PySide6.QtCore import QSize, Qt, QTimer
from PySide6.QtWidgets import (
    QAbstractItemView,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from tasktime.config import SETTINGS
from tasktime.domain.entities import Task
from tasktime.domain.enums import Priority, TimeUnit
from tasktime.domain.timeutils import format_duration, format_slot

PRIORITY_OPTIONS = [
    ("Low", Priority.LOW),
    ("Medium", Priority.MEDIUM),
    ("High", Priority.HIGH),
]

PRIORITY_COLORS = {
    Priority.LOW: "#7CC4A1",
    Priority.MEDIUM: "#E0B25B",
    Priority.HIGH: "#E57B63",
}

UNIT_LABELS = {
    TimeUnit.MINUTES: "min",
    TimeUnit.HOURS: "h",
}


class TaskItemWidget(QWidget):
    def __init__(self, task: Task):
        super().__init__()
        self.task = task

        self.setObjectName("TaskCard")
        self.setAttribute(Qt.WA_StyledBackground, True)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        self.setMinimumHeight(64)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)
        layout.setSpacing(4)

        title = QLabel(task.title.strip() or "Untitled")
        title.setProperty("class", "task-title")
        title.setWordWrap(True)
        title.setMinimumWidth(0)
        title.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)

        meta_parts = []
        if task.date:
            when = task.date.strftime("%d.%m.%Y")
            if task.time_start is not None:
                when = f"{when} {format_slot(task.time_start, task.ante_meridiem)}"
            meta_parts.append(when)
        if task.estimated_time:
            meta_parts.append(f"Estimate: {task.estimated_time} {UNIT_LABELS[task.time_unit]}")
        if task.time_spent:
            meta_parts.append(f"Spent: {format_duration(task.time_spent)}")
        if task.status:
            meta_parts.append(f"Status: {task.status}")

        meta = QLabel(" | ".join(meta_parts) if meta_parts else "No details")
        meta.setProperty("class", "task-meta")
        meta.setWordWrap(True)
        meta.setMinimumWidth(0)
        meta.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)

        priority_label = next(
            (label for label, value in PRIORITY_OPTIONS if value == task.priority),
            "Unknown",
        )
        priority = QLabel(priority_label)
        priority.setProperty("class", "task-priority")
        priority.setStyleSheet(
            f"background-color: {PRIORITY_COLORS.get(task.priority, '#9CA3AF')};"
        )
        priority.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Fixed)

        header = QHBoxLayout()
        header.setSpacing(8)
        header.addWidget(title, 1)
        header.addWidget(priority, 0, Qt.AlignTop)

        layout.addLayout(header)
        layout.addWidget(meta)

    def set_selected(self, selected: bool) -> None:
        self.setProperty("selected", selected)
        self.style().unpolish(self)
        self.style().polish(self)


class TaskItemContainer(QWidget):
    def __init__(self, task_widget: TaskItemWidget, h_margin: int = 12, parent=None):
        super().__init__(parent)
        self.task_widget = task_widget
        layout = QHBoxLayout(self)
        layout.setContentsMargins(h_margin, 0, h_margin, 0)
        layout.setSpacing(0)
        layout.addWidget(task_widget)

    @property
    def task(self) -> Task:
        return self.task_widget.task

    def set_selected(self, selected: bool) -> None:
        self.task_widget.set_selected(selected)


class TaskListWidget(QListWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self._h_margin = 12
        self._v_margin = 8
        self.setSelectionMode(QAbstractItemView.SingleSelection)
        self.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self._update_viewport_margins()

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self.sync_item_sizes()

    def _update_viewport_margins(self) -> None:
        scrollbar_width = self.verticalScrollBar().width() or self.verticalScrollBar().sizeHint().width()
        right_margin = self._h_margin + (scrollbar_width if self.verticalScrollBar().isVisible() else 0)
        self.setViewportMargins(self._h_margin, self._v_margin, right_margin, self._v_margin)

    def sync_item_sizes(self) -> None:
        self._update_viewport_margins()
        viewport_width = self.viewport().width()
        for index in range(self.count()):
            item = self.item(index)
            widget = self.itemWidget(item)
            if widget:
                widget.setMinimumWidth(viewport_width)
                widget.setMaximumWidth(viewport_width)
                widget.adjustSize()
                hint = widget.sizeHint()
                item.setSizeHint(QSize(viewport_width, hint.height()))
                widget.resize(viewport_width, hint.height())


class Toast(QLabel):
    """Short-lived notification pinned to the bottom-right corner of its parent."""

    def __init__(self, parent: QWidget):
        super().__init__(parent)
        self.setObjectName("Toast")
        self.setWordWrap(True)
        self.setMaximumWidth(360)
        self.setAttribute(Qt.WA_StyledBackground, True)
        self.hide()

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self.hide)

    def show_message(self, text: str, variant: str = "success") -> None:
        self.setText(text)
        self.setProperty("variant", variant)
        self.style().unpolish(self)
        self.style().polish(self)
        self.adjustSize()

        parent = self.parentWidget()
        margin = 16
        self.move(
            parent.width() - self.width() - margin,
            parent.height() - self.height() - margin,
        )
        self.raise_()
        self.show()
        self._timer.start(SETTINGS.toast_timeout_ms)
