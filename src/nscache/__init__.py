"""nscache: namespaced expiring key/value cache."""

from .types import (
    CacheType,
    CacheError,
    CacheConfigError,
    CacheDisposedError,
)
from .storage import StorageBackend, MemoryStorage, SQLiteStorage, StorageRegistry
from .core import (
    Algorithm,
    CacheManager,
    Settings,
    Stats,
    configure_logging,
    create_container,
    get_settings,
)

__version__ = "1.0.0"

__all__ = [
    "CacheManager",
    "CacheType",
    "CacheError",
    "CacheConfigError",
    "CacheDisposedError",
    "StorageBackend",
    "MemoryStorage",
    "SQLiteStorage",
    "StorageRegistry",
    "Algorithm",
    "Settings",
    "Stats",
    "configure_logging",
    "create_container",
    "get_settings",
]
