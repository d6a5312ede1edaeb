# src/ocean_tasks/core/session.py

"""
Session controller.

Owns transient, non-persisted state (filter, search query, draft text and
the single in-progress edit) and turns user intents into TaskStore calls.
After every store call the full collection is written back to storage.

Edit lifecycle:
  Idle --begin_edit--> Editing(id) --commit/cancel/remove(id)--> Idle
At most one task is under edit. begin_edit on another task while editing is
refused; the caller resolves the current edit first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..tasks.task_models import Task, TaskCollection, TaskFilter
from ..tasks.task_store import TaskStore, TaskView
from .ports import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SessionState:
    filter: TaskFilter = TaskFilter.ALL
    search_query: str = ""
    draft_title: str = ""
    editing_id: str | None = None
    editing_title: str = ""

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None


class SessionController:
    def __init__(self, store: TaskStore, storage: KeyValueStore, *, tasks_key: str = "tasks") -> None:
        self._store = store
        self._storage = storage
        self._tasks_key = tasks_key
        self.state = SessionState()

    # ---- persistence ----

    def persist(self) -> bool:
        """Write the full collection; failures are logged and swallowed."""
        try:
            ok = self._storage.set(self._tasks_key, self._store.serialize())
        except Exception:
            logger.warning("Failed to persist tasks key=%s", self._tasks_key, exc_info=True)
            return False
        if not ok:
            logger.warning("Storage rejected task write key=%s", self._tasks_key)
        return ok

    def _after_mutation(self, tasks: TaskCollection) -> TaskCollection:
        self.persist()
        return tasks

    def close(self) -> None:
        """Final flush at shutdown."""
        self.persist()

    # ---- derived values ----

    @property
    def tasks(self) -> TaskCollection:
        return self._store.tasks

    @property
    def remaining_count(self) -> int:
        return self._store.remaining_count()

    @property
    def has_completed(self) -> bool:
        return self._store.has_completed()

    @property
    def can_submit_draft(self) -> bool:
        return bool(self.state.draft_title.strip())

    def visible_tasks(self) -> TaskView:
        return self._store.filter_and_search(self.state.filter, self.state.search_query)

    def get(self, task_id: str) -> Task | None:
        return self._store.get(task_id)

    # ---- view state ----

    def set_filter(self, task_filter: TaskFilter | str) -> None:
        if not isinstance(task_filter, TaskFilter):
            task_filter = TaskFilter.parse(task_filter)
        self.state.filter = task_filter

    def set_search(self, query: str) -> None:
        self.state.search_query = query or ""

    def set_draft(self, text: str) -> None:
        self.state.draft_title = text or ""

    # ---- task intents ----

    def add(self, title: str) -> TaskCollection:
        return self._after_mutation(self._store.add(title))

    def submit_draft(self) -> TaskCollection:
        """Add the draft as a task; the draft is cleared only if a task was created."""
        before = len(self._store.tasks)
        tasks = self.add(self.state.draft_title)
        if len(tasks) > before:
            self.state.draft_title = ""
        return tasks

    def toggle(self, task_id: str) -> TaskCollection:
        return self._after_mutation(self._store.toggle(task_id))

    def remove(self, task_id: str) -> TaskCollection:
        tasks = self._store.remove(task_id)
        if self.state.editing_id == task_id:
            # Deleted while under edit: drop the buffer, no commit.
            self._leave_edit()
        return self._after_mutation(tasks)

    def clear_completed(self) -> TaskCollection:
        tasks = self._store.clear_completed()
        if self.state.editing_id is not None and self._store.get(self.state.editing_id) is None:
            self._leave_edit()
        return self._after_mutation(tasks)

    # ---- edit lifecycle ----

    def _leave_edit(self) -> None:
        self.state.editing_id = None
        self.state.editing_title = ""

    def begin_edit(self, task_id: str) -> bool:
        editing = self.state.editing_id
        if editing == task_id:
            return True
        if editing is not None:
            logger.debug("begin_edit refused: task %s is already under edit", editing)
            return False

        task = self._store.get(task_id)
        if task is None:
            logger.debug("begin_edit: unknown task id=%s", task_id)
            return False

        self.state.editing_id = task.id
        self.state.editing_title = task.title
        return True

    def change_edit(self, text: str) -> None:
        if self.state.editing_id is None:
            return
        self.state.editing_title = text or ""

    def commit_edit(self) -> TaskCollection:
        task_id = self.state.editing_id
        if task_id is None:
            return self._store.tasks

        title = self.state.editing_title
        self._leave_edit()
        return self._after_mutation(self._store.commit_edit(task_id, title))

    def cancel_edit(self) -> None:
        self._leave_edit()
