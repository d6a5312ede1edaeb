# tasks/task_store.py

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import replace

from ..core.ports import KeyValueStore
from .task_models import (
    Task,
    TaskCollection,
    TaskFilter,
    new_task_id,
    now_ms,
    task_from_record,
    task_to_record,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], int]
IdFactory = Callable[[], str]


class TaskView:
    """
    Lazy filtered/searched projection over a collection snapshot.

    Iterating twice re-runs the projection, so the view can be consumed
    any number of times. It never mutates the snapshot.
    """

    __slots__ = ("_tasks", "_filter", "_needle")

    def __init__(self, tasks: TaskCollection, task_filter: TaskFilter, query: str) -> None:
        self._tasks = tasks
        self._filter = task_filter
        self._needle = (query or "").strip().casefold()

    def __iter__(self) -> Iterator[Task]:
        for task in self._tasks:
            if not self._filter.accepts(task):
                continue
            if self._needle and self._needle not in task.title.casefold():
                continue
            yield task

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        return any(True for _ in self)

    def __repr__(self) -> str:
        return f"TaskView(filter={self._filter.value!r}, query={self._needle!r})"


def filter_and_search(tasks: TaskCollection, task_filter: TaskFilter | str, query: str) -> TaskView:
    """
    Narrow by filter, then by case-insensitive substring match of the
    trimmed query against titles. An empty query matches everything.
    """
    if not isinstance(task_filter, TaskFilter):
        task_filter = TaskFilter.parse(task_filter)
    return TaskView(tuple(tasks), task_filter, query)


# ---- serialization ----


def serialize_tasks(tasks: Iterable[Task]) -> bytes:
    payload = [task_to_record(t) for t in tasks]
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


def deserialize_tasks(raw: bytes | str | None) -> TaskCollection:
    """
    Decode a persisted collection.

    All-or-nothing: any malformed input yields an empty collection.
    Later duplicates of an id are dropped.
    """
    if raw is None:
        return ()
    try:
        text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
        data = json.loads(text)
        if not isinstance(data, list):
            raise ValueError("task collection must be a list")
        loaded = [task_from_record(item) for item in data]
    except (UnicodeDecodeError, ValueError, OverflowError, RecursionError) as e:
        # json.JSONDecodeError is a ValueError.
        logger.warning("Discarding malformed task collection: %s", e)
        return ()

    seen: set[str] = set()
    out: list[Task] = []
    for task in loaded:
        if task.id in seen:
            logger.warning("Dropping duplicate task id=%s", task.id)
            continue
        seen.add(task.id)
        out.append(task)
    return tuple(out)


class TaskStore:
    """
    In-memory owner of the ordered task collection.

    Newest tasks come first. Every mutating call returns the new snapshot;
    calls against unknown ids return the snapshot unchanged. Persistence is
    the caller's job (see SessionController).
    """

    def __init__(
        self,
        tasks: Iterable[Task] = (),
        *,
        clock: Clock = now_ms,
        id_factory: IdFactory = new_task_id,
    ) -> None:
        self._tasks: TaskCollection = tuple(tasks)
        self._clock = clock
        self._id_factory = id_factory
        # Every id handed out or loaded this session, including deleted ones.
        self._issued_ids: set[str] = {t.id for t in self._tasks}

    @classmethod
    def load(
        cls,
        storage: KeyValueStore,
        key: str,
        *,
        clock: Clock = now_ms,
        id_factory: IdFactory = new_task_id,
    ) -> TaskStore:
        """Build a store from persisted bytes, falling back to an empty collection."""
        try:
            raw = storage.get(key)
        except Exception:
            logger.exception("Failed to read task collection key=%s", key)
            raw = None

        tasks = deserialize_tasks(raw)
        logger.info("TaskStore ready key=%s total=%s", key, len(tasks))
        return cls(tasks, clock=clock, id_factory=id_factory)

    # ---- low-level helpers ----

    def _index_of(self, task_id: str) -> int | None:
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        return None

    def _touch(self, task: Task) -> int:
        # updated_at never moves backwards, even if the wall clock does.
        return max(self._clock(), task.updated_at)

    def _replace_at(self, index: int, task: Task) -> TaskCollection:
        self._tasks = self._tasks[:index] + (task,) + self._tasks[index + 1 :]
        return self._tasks

    def _next_id(self) -> str:
        task_id = self._id_factory()
        while task_id in self._issued_ids:
            task_id = self._id_factory()
        self._issued_ids.add(task_id)
        return task_id

    # ---- queries ----

    @property
    def tasks(self) -> TaskCollection:
        return self._tasks

    def get(self, task_id: str) -> Task | None:
        idx = self._index_of(task_id)
        return self._tasks[idx] if idx is not None else None

    def remaining_count(self) -> int:
        return sum(1 for t in self._tasks if not t.completed)

    def has_completed(self) -> bool:
        return any(t.completed for t in self._tasks)

    def filter_and_search(self, task_filter: TaskFilter | str, query: str) -> TaskView:
        return filter_and_search(self._tasks, task_filter, query)

    def serialize(self) -> bytes:
        return serialize_tasks(self._tasks)

    # ---- mutations ----

    def add(self, title: str) -> TaskCollection:
        trimmed = (title or "").strip()
        if not trimmed:
            return self._tasks

        now = self._clock()
        task = Task(
            id=self._next_id(),
            title=trimmed,
            completed=False,
            created_at=now,
            updated_at=now,
        )
        self._tasks = (task,) + self._tasks
        logger.debug("Task added id=%s", task.id)
        return self._tasks

    def toggle(self, task_id: str) -> TaskCollection:
        idx = self._index_of(task_id)
        if idx is None:
            logger.debug("toggle: unknown task id=%s", task_id)
            return self._tasks

        task = self._tasks[idx]
        updated = replace(task, completed=not task.completed, updated_at=self._touch(task))
        return self._replace_at(idx, updated)

    def remove(self, task_id: str) -> TaskCollection:
        idx = self._index_of(task_id)
        if idx is None:
            logger.debug("remove: unknown task id=%s", task_id)
            return self._tasks

        self._tasks = self._tasks[:idx] + self._tasks[idx + 1 :]
        logger.debug("Task removed id=%s", task_id)
        return self._tasks

    def commit_edit(self, task_id: str, new_title: str) -> TaskCollection:
        """Set a new title; an empty trimmed title deletes the task."""
        trimmed = (new_title or "").strip()
        if not trimmed:
            return self.remove(task_id)

        idx = self._index_of(task_id)
        if idx is None:
            logger.debug("commit_edit: unknown task id=%s", task_id)
            return self._tasks

        task = self._tasks[idx]
        updated = replace(task, title=trimmed, updated_at=self._touch(task))
        return self._replace_at(idx, updated)

    def clear_completed(self) -> TaskCollection:
        kept = tuple(t for t in self._tasks if not t.completed)
        removed = len(self._tasks) - len(kept)
        if removed:
            logger.debug("Cleared %d completed task(s)", removed)
        self._tasks = kept
        return self._tasks
