"""
Storage Registry
One shared backend per storage type
"""

import logging
import threading
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Union

from ..types import CacheType, resolve_cache_type
from .base import StorageBackend
from .memory import MemoryStorage
from .sqlite import MEMORY_DATABASE, SQLiteStorage

logger = logging.getLogger(__name__)


class StorageRegistry:
    """
    Owns the storage media that cache namespaces share.

    Each storage type maps to exactly one backend instance, created on first
    use. Namespaces resolved through the same registry share the medium, the
    way browser pages share localStorage.
    """

    def __init__(self, local_db_path: Union[str, Path] = Path(".nscache") / "local.db"):
        self.local_db_path = Path(local_db_path)
        self._backends: Dict[CacheType, StorageBackend] = {}
        self._lock = threading.Lock()

    def _create(self, cache_type: CacheType) -> StorageBackend:
        if cache_type is CacheType.MEMORY:
            return MemoryStorage()
        if cache_type is CacheType.LOCAL:
            return SQLiteStorage(self.local_db_path)
        return SQLiteStorage(MEMORY_DATABASE)

    def get(self, cache_type: Union[CacheType, str]) -> StorageBackend:
        """
        Get the backend for a storage type, creating it on first use.

        Raises:
            CacheConfigError: If the storage type is not supported
        """
        cache_type = resolve_cache_type(cache_type)
        with self._lock:
            backend = self._backends.get(cache_type)
            if backend is None:
                backend = self._create(cache_type)
                self._backends[cache_type] = backend
                logger.info(f"Storage created: {cache_type.value} ({type(backend).__name__})")
            return backend

    def register(self, cache_type: Union[CacheType, str], backend: StorageBackend) -> None:
        """Install a backend for a storage type, replacing the current one"""
        cache_type = resolve_cache_type(cache_type)
        with self._lock:
            previous: Optional[StorageBackend] = self._backends.get(cache_type)
            self._backends[cache_type] = backend
        if previous is not None and previous is not backend:
            previous.close()

    def close(self) -> None:
        """Close every backend created or registered so far"""
        with self._lock:
            backends = list(self._backends.values())
            self._backends.clear()
        for backend in backends:
            backend.close()


@lru_cache
def get_default_registry() -> StorageRegistry:
    """Process-wide registry built from settings."""
    from ..core.config import get_settings

    return StorageRegistry(get_settings().local_db_path)
