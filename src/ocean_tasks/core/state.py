# src/ocean_tasks/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .ports import KeyValueStore
from .session import SessionController
from .theme import Theme


@dataclass
class AppState:
    """
    Application state for one process lifetime.

    Built once by the composition root (cli/bootstrap.py) and passed by
    reference to connectors and command handlers.
    """

    # Settings object (config.Settings in production, SimpleNamespace in tests).
    settings: Any

    storage: KeyValueStore
    session: SessionController
    theme: Theme = Theme.LIGHT
