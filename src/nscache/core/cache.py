"""Namespaced expiring cache over a shared storage medium.

Several CacheManager instances can share one storage (memory, local or
session) without colliding: every logical key is hashed and prefixed with
the instance namespace. Entries carry their write time and expire after a
configurable TTL, checked on read and by a background sweep.
"""

import math
import re
import threading
from contextlib import nullcontext
from dataclasses import dataclass
from numbers import Real
from typing import Any, Callable

from ..monitoring import MetricsCollector, metrics_collector
from ..storage import StorageBackend, StorageRegistry, get_default_registry
from ..types import CacheConfigError, CacheDisposedError, CacheType, resolve_cache_type
from .config import get_settings
from .envelope import Envelope, decode_entry, encode_envelope, now_ms, wrap
from .hash import Algorithm, digest_length, hash_string
from .logging_config import LogContext, get_logger
from .scheduler import SweepScheduler, is_schedulable

logger = get_logger(__name__)

# Marks an omitted ttl; an explicit None disables expiration
SETTINGS_DEFAULT: Any = object()


def ttl_enabled(ttl: Any) -> bool:
    """Expiration applies only to a positive number of milliseconds."""
    return isinstance(ttl, Real) and not isinstance(ttl, bool) and not math.isnan(ttl) and ttl > 0


@dataclass
class Stats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    writes: int = 0
    removals: int = 0
    expirations: int = 0
    sweeps: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate (0.0 to 1.0)."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def to_dict(self) -> dict[str, Any]:
        """Export as dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "writes": self.writes,
            "removals": self.removals,
            "expirations": self.expirations,
            "sweeps": self.sweeps,
            "hit_rate": self.hit_rate,
        }


class CacheManager:
    """
    Namespaced key/value cache with TTL expiration.

    Features:
    - Memory, local (SQLite file) and session (in-memory SQLite) storage
    - Hashed, namespace-prefixed storage keys
    - Expiration on read plus a recurring background sweep
    - Hit/miss statistics and Prometheus metrics

    Examples:
        >>> cache = CacheManager("users", CacheType.MEMORY, ttl=1000)
        >>> cache.set_item("alice", {"age": 30})
        >>> cache.get_item("alice")
        {'age': 30}
        >>> cache.dispose()
    """

    def __init__(
        self,
        namespace: str,
        storage_type: CacheType | str | None = None,
        ttl: Any = SETTINGS_DEFAULT,
        *,
        storage: StorageBackend | None = None,
        registry: StorageRegistry | None = None,
        hash_algorithm: Algorithm | str | None = None,
        clock: Callable[[], int] | None = None,
        metrics: MetricsCollector | None = None,
        enable_metrics: bool | None = None,
    ):
        """
        Initialize cache and start the expiry sweep.

        Args:
            namespace: Prefix that scopes this instance's keys in the storage
            storage_type: Storage medium (memory, local or session; default: settings.default_storage)
            ttl: Time-to-live in milliseconds; <= 0 or non-numeric disables expiration
                (default: settings.default_ttl_ms)
            storage: Explicit backend; overrides the registry lookup
            registry: Registry to resolve storage_type from (default: process-wide)
            hash_algorithm: Algorithm for storage keys (default: settings.hash_algorithm)
            clock: Returns current epoch milliseconds
            metrics: Metrics collector; always used when given
            enable_metrics: Use the global collector (default: settings.enable_metrics)

        Raises:
            CacheConfigError: Empty namespace, unsupported storage type or hash algorithm
        """
        if not isinstance(namespace, str) or not namespace:
            raise CacheConfigError("namespace must be a non-empty string")

        settings = get_settings()
        if storage_type is None:
            storage_type = settings.default_storage
        if ttl is SETTINGS_DEFAULT:
            ttl = settings.default_ttl_ms
        if hash_algorithm is None:
            hash_algorithm = settings.hash_algorithm

        self.namespace = namespace
        self.storage_type = resolve_cache_type(storage_type)

        try:
            self.hash_algorithm = Algorithm(hash_algorithm)
        except ValueError:
            raise CacheConfigError(f"Unsupported hash algorithm: {hash_algorithm!r}") from None

        if storage is None:
            storage = (registry or get_default_registry()).get(self.storage_type)
        self.storage: StorageBackend | None = storage

        if metrics is None:
            if enable_metrics is None:
                enable_metrics = settings.enable_metrics
            metrics = metrics_collector if enable_metrics else None
        self._metrics = metrics
        self._clock = clock or now_ms

        self._key_pattern = re.compile(
            re.escape(namespace) + "_[0-9a-f]{%d}" % digest_length(self.hash_algorithm)
        )
        self._lock = threading.RLock()
        self._disposed = False
        self._scheduler: SweepScheduler | None = None
        self._ttl: Any = None
        self._stats = Stats()

        # Ordered set: dict keys keep insertion order and drop duplicates
        self._stored_keys: dict[str, None] = dict.fromkeys(self.get_stored_keys())
        self.ttl = ttl

        logger.debug(
            "cache_created",
            namespace=namespace,
            storage=self.storage_type.value,
            tracked=len(self._stored_keys),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def ttl(self) -> Any:
        """Time-to-live in milliseconds."""
        return self._ttl

    @ttl.setter
    def ttl(self, value: Any) -> None:
        """Set TTL and reschedule the sweep."""
        self._ensure_active()
        self._cancel_sweep()
        self._ttl = value

        if is_schedulable(value):
            self._scheduler = SweepScheduler(self.remove_expired, value, name=self.namespace)
            self._scheduler.start()

    @property
    def sweep_scheduled(self) -> bool:
        """Whether a recurring sweep is active."""
        return self._scheduler is not None and self._scheduler.active

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Cancel the sweep and release references. Stored data is kept."""
        if self._disposed:
            return

        # Cancel outside the lock: a running sweep takes the lock per key
        self._cancel_sweep()

        with self._lock:
            self._disposed = True
            self._stored_keys = {}
            self._ttl = None
            self.storage = None
            self._metrics = None

        logger.debug("cache_disposed", namespace=self.namespace)

    def _cancel_sweep(self) -> None:
        scheduler, self._scheduler = self._scheduler, None
        if scheduler is not None:
            scheduler.cancel()

    def _ensure_active(self) -> None:
        if self._disposed:
            raise CacheDisposedError(f"Cache '{self.namespace}' has been disposed")

    def __enter__(self) -> "CacheManager":
        return self

    def __exit__(self, *args: Any) -> None:
        self.dispose()

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def get_stored_keys(self) -> list[str]:
        """Storage keys in the medium that belong to this namespace."""
        self._ensure_active()
        return [key for key in self.storage.keys() if self._key_pattern.fullmatch(key)]

    def get_namespace_key(self, key: str) -> str:
        """
        Derive the storage key for a logical key.

        A key that already has the shape of one of this namespace's storage
        keys is returned unchanged, so derivation is idempotent and internal
        callers can pass storage keys back in. This is a compatibility
        affordance, not a type boundary.
        """
        if self._key_pattern.fullmatch(key):
            return key
        return f"{self.namespace}_{hash_string(key, self.hash_algorithm)}"

    @property
    def tracked_keys(self) -> list[str]:
        """Snapshot of the storage keys this instance owns."""
        with self._lock:
            return list(self._stored_keys)

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def _load(self, storage_key: str) -> Envelope | Any | None:
        raw = self.storage.get(storage_key)
        if self.storage.text_only:
            return decode_entry(raw)
        return raw

    def _entry_expired(self, entry: Envelope | Any | None) -> bool:
        if not ttl_enabled(self._ttl):
            return False
        if entry is None:
            return True
        if not isinstance(entry, Envelope):
            # Data written without an envelope has no age
            return False
        return entry.written_at < self._clock() - self._ttl

    def is_expired(self, key: str) -> bool:
        """
        Check whether an entry has outlived the TTL.

        Absent or unreadable entries count as expired. Always False when
        expiration is disabled.
        """
        self._ensure_active()
        return self._entry_expired(self._load(self.get_namespace_key(key)))

    def set_item(self, key: str, value: Any) -> None:
        """
        Cache value with current timestamp.

        Args:
            key: Logical key (or one of this namespace's storage keys)
            value: Value to cache; must be JSON serializable for text storages

        Raises:
            TypeError: If a text storage cannot serialize the value
        """
        self._ensure_active()
        envelope = wrap(value, self._clock())
        payload = encode_envelope(envelope) if self.storage.text_only else envelope

        with self._lock:
            storage_key = self.get_namespace_key(key)
            self.storage.set(storage_key, payload)
            self._stored_keys[storage_key] = None
            self._stats.writes += 1
            tracked = len(self._stored_keys)

        logger.debug("cache_set", namespace=self.namespace, key=storage_key)
        self._record("set", "ok")
        if self._metrics:
            self._metrics.set_tracked_keys(self.namespace, tracked)

    def get_item(self, key: str) -> Any | None:
        """
        Get cached value if available and not expired.

        An expired entry is removed on the spot.

        Args:
            key: Logical key (or one of this namespace's storage keys)

        Returns:
            Cached value or None if not found/expired/unreadable
        """
        self._ensure_active()
        storage_key = self.get_namespace_key(key)

        with self._lock:
            entry = self._load(storage_key)
            expired = self._entry_expired(entry)
            evicted = expired and self.remove_item(storage_key) and entry is not None

        if evicted:
            self._stats.expirations += 1
            if self._metrics:
                self._metrics.record_eviction(self.namespace, "read")

        if expired and entry is not None:
            self._stats.misses += 1
            self._record("get", "expired")
            return None

        if entry is None:
            self._stats.misses += 1
            self._record("get", "miss")
            return None

        self._stats.hits += 1
        self._record("get", "hit")
        return entry.value if isinstance(entry, Envelope) else entry

    def remove_item(self, key: str) -> bool:
        """
        Remove an entry owned by this instance.

        Args:
            key: Logical key (or one of this namespace's storage keys)

        Returns:
            True if removed, False if this instance does not track the key
        """
        self._ensure_active()
        with self._lock:
            storage_key = self.get_namespace_key(key)
            if storage_key not in self._stored_keys:
                return False

            self.storage.remove(storage_key)
            del self._stored_keys[storage_key]
            self._stats.removals += 1
            tracked = len(self._stored_keys)

        self._record("remove", "ok")
        if self._metrics:
            self._metrics.set_tracked_keys(self.namespace, tracked)
        return True

    def get_collection(self) -> dict[str, Any]:
        """
        Rescan the storage and return every live entry of this namespace.

        Expired entries are skipped, not removed.

        Returns:
            Mapping of storage key to value
        """
        self._ensure_active()
        with self._lock:
            self._stored_keys = dict.fromkeys(self.get_stored_keys())
            keys = list(self._stored_keys)

        collection: dict[str, Any] = {}
        for storage_key in keys:
            entry = self._load(storage_key)
            if entry is None or self._entry_expired(entry):
                continue
            collection[storage_key] = entry.value if isinstance(entry, Envelope) else entry
        return collection

    def clear(self) -> None:
        """Remove every tracked entry from the storage."""
        self._ensure_active()
        with self._lock:
            for storage_key in self._stored_keys:
                self.storage.remove(storage_key)
            cleared = len(self._stored_keys)
            self._stored_keys = {}
            self._stats.removals += cleared

        logger.debug("cache_cleared", namespace=self.namespace, removed=cleared)
        self._record("clear", "ok")
        if self._metrics:
            self._metrics.set_tracked_keys(self.namespace, 0)

    def remove_expired(self) -> int:
        """
        Sweep: remove every tracked entry that has expired.

        Runs on the scheduler thread but is safe to call directly. A failure
        on one key is logged and the sweep moves on to the next.

        Returns:
            Number of entries removed
        """
        if self._disposed:
            return 0

        removed = errors = 0
        metrics = self._metrics
        timer = metrics.measure_sweep(self.namespace) if metrics else nullcontext()
        with LogContext(namespace=self.namespace), timer:
            for storage_key in self.tracked_keys:
                with self._lock:
                    if self._disposed:
                        break
                    try:
                        if self.is_expired(storage_key) and self.remove_item(storage_key):
                            removed += 1
                    except Exception:
                        errors += 1
                        logger.warning("sweep_key_failed", key=storage_key, exc_info=True)
                        if metrics:
                            metrics.record_sweep_error(self.namespace)

            self._stats.sweeps += 1
            self._stats.expirations += removed
            if metrics:
                metrics.record_eviction(self.namespace, "sweep", removed)

            if removed or errors:
                logger.info("sweep_complete", removed=removed, errors=errors)
        return removed

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        """Number of live entries (computed fresh from the storage)."""
        return len(self.get_collection())

    @property
    def stats(self) -> Stats:
        """Get cache statistics."""
        return self._stats

    def _record(self, operation: str, result: str) -> None:
        if self._metrics:
            self._metrics.record_operation(self.namespace, operation, result)

    def __len__(self) -> int:
        """Return number of live entries."""
        return self.size

    def __contains__(self, key: str) -> bool:
        """Check if a live entry exists (doesn't remove expired entries)."""
        self._ensure_active()
        storage_key = self.get_namespace_key(key)
        with self._lock:
            if storage_key not in self._stored_keys:
                return False
        entry = self._load(storage_key)
        return entry is not None and not self._entry_expired(entry)

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else f"ttl={self._ttl!r}"
        return f"CacheManager(namespace={self.namespace!r}, storage={self.storage_type.value}, {state})"


__all__ = ["CacheManager", "Stats", "ttl_enabled"]
