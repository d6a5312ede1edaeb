# src/ocean_tasks/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the storage medium swappable and makes testing easier.
"""

from typing import Protocol


class KeyValueStore(Protocol):
    """
    Opaque local byte store.

    - get() returns None when the key is absent
    - set() reports failure with False instead of raising
    """

    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes) -> bool: ...

    def close(self) -> None: ...
