# tasks/task_models.py

from __future__ import annotations

import math
import time
import uuid
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

TaskCollection = tuple["Task", ...]


class TaskFilter(StrEnum):
    """Coarse narrowing applied before the search query."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, raw: str | None) -> TaskFilter:
        if not raw:
            return cls.ALL
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.ALL

    def accepts(self, task: Task) -> bool:
        if self is TaskFilter.ACTIVE:
            return not task.completed
        if self is TaskFilter.COMPLETED:
            return task.completed
        return True


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    completed: bool
    created_at: int
    updated_at: int


def now_ms() -> int:
    """Wall clock in epoch milliseconds."""
    return int(time.time() * 1000)


def new_task_id() -> str:
    return uuid.uuid4().hex


# ---- persisted record format ----
#
# One JSON object per task, camelCase keys:
#   {"id": "...", "title": "...", "completed": false, "createdAt": 0, "updatedAt": 0}


def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "completed": task.completed,
        "createdAt": task.created_at,
        "updatedAt": task.updated_at,
    }


def _timestamp(raw: Any, name: str) -> int:
    # bool is an int subclass; reject it explicitly.
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ValueError(f"{name} must be a number")
    if not math.isfinite(raw):
        raise ValueError(f"{name} must be finite")
    return int(raw)


def task_from_record(raw: Any) -> Task:
    """
    Build a Task from a decoded record.

    Raises ValueError if the record is structurally invalid.
    """
    if not isinstance(raw, dict):
        raise ValueError("task record must be an object")

    task_id = raw.get("id")
    if not isinstance(task_id, str) or not task_id:
        raise ValueError("id must be a non-empty string")

    title = raw.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ValueError("title must be a non-empty string")

    completed = raw.get("completed")
    if not isinstance(completed, bool):
        raise ValueError("completed must be a boolean")

    created_at = _timestamp(raw.get("createdAt"), "createdAt")
    updated_at = _timestamp(raw.get("updatedAt"), "updatedAt")

    return Task(
        id=task_id,
        title=title.strip(),
        completed=completed,
        created_at=created_at,
        updated_at=updated_at,
    )
