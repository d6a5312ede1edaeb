# src/ocean_tasks/core/theme.py

"""Display theme preference (light/dark), stored next to the task collection."""

from __future__ import annotations

import logging
from enum import StrEnum

from .ports import KeyValueStore

logger = logging.getLogger(__name__)


class Theme(StrEnum):
    LIGHT = "light"
    DARK = "dark"

    @classmethod
    def parse(cls, raw: str | bytes | None) -> Theme:
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8", errors="replace")
        if not raw:
            return cls.LIGHT
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.LIGHT


def toggle_theme(theme: Theme) -> Theme:
    return Theme.DARK if theme is Theme.LIGHT else Theme.LIGHT


def load_theme(storage: KeyValueStore, key: str) -> Theme:
    try:
        raw = storage.get(key)
    except Exception:
        logger.exception("Failed to read theme key=%s", key)
        return Theme.LIGHT
    return Theme.parse(raw)


def save_theme(storage: KeyValueStore, key: str, theme: Theme) -> bool:
    try:
        ok = storage.set(key, theme.value.encode("utf-8"))
    except Exception:
        logger.warning("Failed to save theme key=%s", key, exc_info=True)
        return False
    if not ok:
        logger.warning("Storage rejected theme write key=%s", key)
    return ok
