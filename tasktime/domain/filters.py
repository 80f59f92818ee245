from __future__ import annotations

from dataclasses import dataclass

from .enums import Priority


@dataclass(frozen=True)
class TaskFilters:
    search: str | None = None
    priority: Priority | None = None
