# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from ocean_tasks.core.session import SessionController
from ocean_tasks.core.state import AppState
from ocean_tasks.tasks.task_store import TaskStore

from .fakes import FakeClock, InMemoryKeyValueStore, SequentialIds


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="Ocean Tasks",
        data_dir=tmp_path,
        storage_path=tmp_path / "storage.sqlite3",
        tasks_key="tasks",
        theme_key="theme",
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def storage() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def store(clock: FakeClock) -> TaskStore:
    return TaskStore(clock=clock, id_factory=SequentialIds())


@pytest.fixture()
def session(store: TaskStore, storage: InMemoryKeyValueStore) -> SessionController:
    return SessionController(store, storage, tasks_key="tasks")


@pytest.fixture()
def state(settings: SimpleNamespace, storage: InMemoryKeyValueStore, session: SessionController) -> AppState:
    """AppState wired with the in-memory storage fake."""
    return AppState(settings=settings, storage=storage, session=session)
