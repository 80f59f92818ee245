from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import (
    QDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
)

from tasktime.services.weekly_overview import WeeklyOverview


class TimeTrackerDialog(QDialog):
    """Stopwatch whose elapsed time can be logged against a task."""

    def __init__(self, task_title: str, on_log: Callable[[int], None], parent=None):
        super().__init__(parent)
        self.setWindowTitle("Time tracker")
        self.setObjectName("TimeTrackerDialog")
        self.setFixedSize(360, 240)

        self._on_log = on_log
        self.elapsed = 0

        self.timer = QTimer(self)
        self.timer.setInterval(1000)
        self.timer.timeout.connect(self._tick)

        self.task_label = QLabel(task_title)
        self.task_label.setObjectName("TrackerTask")
        self.task_label.setWordWrap(True)

        self.label = QLabel(self._format_time())
        self.label.setObjectName("TrackerTime")

        self.start_button = QPushButton("Start")
        self.start_button.clicked.connect(self.start)

        self.pause_button = QPushButton("Pause")
        self.pause_button.setProperty("variant", "secondary")
        self.pause_button.clicked.connect(self.pause)

        self.reset_button = QPushButton("Reset")
        self.reset_button.setProperty("variant", "ghost")
        self.reset_button.clicked.connect(self.reset)

        self.log_button = QPushButton("Log time")
        self.log_button.clicked.connect(self.log_time)

        buttons = QHBoxLayout()
        buttons.setSpacing(8)
        buttons.addWidget(self.start_button)
        buttons.addWidget(self.pause_button)
        buttons.addWidget(self.reset_button)

        card = QFrame()
        card.setObjectName("TrackerCard")
        card_layout = QVBoxLayout(card)
        card_layout.setContentsMargins(16, 16, 16, 16)
        card_layout.setSpacing(12)
        card_layout.addWidget(self.task_label)
        card_layout.addWidget(self.label, alignment=Qt.AlignLeft)
        card_layout.addLayout(buttons)
        card_layout.addWidget(self.log_button)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.addWidget(card)

    def start(self) -> None:
        if not self.timer.isActive():
            self.timer.start()

    def pause(self) -> None:
        self.timer.stop()

    def reset(self) -> None:
        self.timer.stop()
        self.elapsed = 0
        self.label.setText(self._format_time())

    def log_time(self) -> None:
        self.timer.stop()
        if self.elapsed <= 0:
            return
        self._on_log(self.elapsed * 1000)
        self.accept()

    def _tick(self) -> None:
        self.elapsed += 1
        self.label.setText(self._format_time())

    def _format_time(self) -> str:
        hours, rest = divmod(self.elapsed, 3600)
        minutes, seconds = divmod(rest, 60)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


class WeeklyOverviewDialog(QDialog):
    def __init__(self, overview: WeeklyOverview, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Weekly overview")
        self.resize(520, 260)

        week_end = overview.week_start + timedelta(days=6)
        title = QLabel("Weekly Overview")
        title.setProperty("class", "panel-title")
        subtitle = QLabel(
            f"Week of {overview.week_start.strftime('%d.%m.%Y')} - {week_end.strftime('%d.%m.%Y')}"
            f" • {overview.task_count} task(s) up to {overview.as_of.strftime('%d.%m.%Y')}"
        )
        subtitle.setProperty("class", "stats")

        cards = QHBoxLayout()
        cards.setSpacing(12)
        cards.addWidget(self._build_card("Total Estimated Time", overview.estimated_label))
        cards.addWidget(self._build_card("Total Actual Time", overview.actual_label))

        close_button = QPushButton("Close")
        close_button.clicked.connect(self.accept)

        buttons = QHBoxLayout()
        buttons.addStretch()
        buttons.addWidget(close_button)

        layout = QVBoxLayout(self)
        layout.addWidget(title)
        layout.addWidget(subtitle)
        layout.addLayout(cards)
        layout.addLayout(buttons)

    @staticmethod
    def _build_card(caption: str, value: str) -> QFrame:
        card = QFrame()
        card.setObjectName("OverviewCard")
        card_layout = QVBoxLayout(card)
        card_layout.setContentsMargins(16, 16, 16, 16)

        caption_label = QLabel(caption)
        caption_label.setProperty("class", "section-title")
        value_label = QLabel(value)
        value_label.setObjectName("OverviewValue")

        card_layout.addWidget(caption_label, alignment=Qt.AlignCenter)
        card_layout.addWidget(value_label, alignment=Qt.AlignCenter)
        return card
