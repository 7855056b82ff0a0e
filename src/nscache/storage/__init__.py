"""Storage media for cache namespaces."""

from .base import StorageBackend
from .memory import MemoryStorage
from .sqlite import SQLiteStorage, MEMORY_DATABASE
from .registry import StorageRegistry, get_default_registry

__all__ = [
    "StorageBackend",
    "MemoryStorage",
    "SQLiteStorage",
    "MEMORY_DATABASE",
    "StorageRegistry",
    "get_default_registry",
]
