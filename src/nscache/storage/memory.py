"""
Memory Storage
Process-local volatile map holding values as live objects
"""

import threading
from typing import Any, Optional

from .base import StorageBackend


class MemoryStorage(StorageBackend):
    """Thread-safe in-process storage. Values are stored as-is."""

    text_only = False

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
