# src/ocean_tasks/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- reads persisted tasks and theme, then wires them into AppState,
- flushes everything back to storage at shutdown.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import KeyValueStore
from ..core.session import SessionController
from ..core.state import AppState
from ..core.theme import load_theme, save_theme
from ..storage.kv_store import SqliteKeyValueStore
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    try:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        settings.storage_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        # The store reports its own failures; keep starting up.
        logger.warning("Could not create data directories under %s", settings.data_dir, exc_info=True)


def create_initial_state(*, settings=None, storage: KeyValueStore | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings and storage injectable makes the app easier to test and
    avoids hidden global config reads. If settings is None, falls back to
    get_settings(); if storage is None, opens the SQLite store from settings.
    """
    if settings is None:
        settings = get_settings()

    if storage is None:
        _ensure_local_dirs(settings)
        storage = SqliteKeyValueStore(settings.storage_path)

    store = TaskStore.load(storage, settings.tasks_key)

    return AppState(
        settings=settings,
        storage=storage,
        session=SessionController(store, storage, tasks_key=settings.tasks_key),
        theme=load_theme(storage, settings.theme_key),
    )


def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.session.close()
    except Exception:
        logger.exception("Failed to flush tasks on shutdown.")

    try:
        save_theme(state.storage, state.settings.theme_key, state.theme)
    except Exception:
        logger.exception("Failed to save theme on shutdown.")

    try:
        state.storage.close()
    except Exception:
        logger.debug("Storage close failed.", exc_info=True)
