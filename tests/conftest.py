"""Pytest configuration and fixtures."""

import os

import pytest
from prometheus_client import CollectorRegistry

from nscache import CacheManager, CacheType, MemoryStorage, SQLiteStorage, StorageRegistry
from nscache.core import get_settings
from nscache.monitoring import MetricsCollector


# ============================================================================
# Pytest Hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with environment variables."""
    os.environ['NSCACHE_LOG_LEVEL'] = 'DEBUG'
    os.environ['NSCACHE_ENABLE_METRICS'] = 'false'  # Tests inject their own collector
    get_settings.cache_clear()


# ============================================================================
# Time
# ============================================================================

class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, start: int = 0) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    """Clock starting at t=0."""
    return FakeClock()


# ============================================================================
# Storage Fixtures
# ============================================================================

@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def local_storage(tmp_path):
    """SQLite file storage, closed after the test."""
    storage = SQLiteStorage(tmp_path / "local.db")
    yield storage
    storage.close()


@pytest.fixture
def session_storage():
    """In-memory SQLite storage, closed after the test."""
    storage = SQLiteStorage()
    yield storage
    storage.close()


@pytest.fixture(params=[CacheType.MEMORY, CacheType.LOCAL, CacheType.SESSION], ids=lambda t: t.value)
def storage_kind(request, memory_storage, local_storage, session_storage):
    """(storage type, backend) for every supported medium."""
    backends = {
        CacheType.MEMORY: memory_storage,
        CacheType.LOCAL: local_storage,
        CacheType.SESSION: session_storage,
    }
    return request.param, backends[request.param]


@pytest.fixture
def registry(tmp_path):
    """Storage registry with its local database under tmp_path."""
    reg = StorageRegistry(tmp_path / "registry" / "local.db")
    yield reg
    reg.close()


# ============================================================================
# Metrics
# ============================================================================

@pytest.fixture
def metrics():
    """Metrics collector on a private Prometheus registry."""
    return MetricsCollector(CollectorRegistry())


# ============================================================================
# Cache Fixtures
# ============================================================================

@pytest.fixture
def make_cache(clock, metrics, memory_storage):
    """Factory for caches that are disposed after the test."""
    created = []

    def factory(namespace="users", storage_type=CacheType.MEMORY, ttl=1000, storage=None, **kwargs):
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("metrics", metrics)
        cache = CacheManager(
            namespace,
            storage_type,
            ttl,
            storage=storage if storage is not None else memory_storage,
            **kwargs,
        )
        created.append(cache)
        return cache

    yield factory

    for cache in created:
        cache.dispose()


@pytest.fixture
def cache(make_cache):
    """Memory cache, namespace 'users', ttl 1000ms, fake clock."""
    return make_cache()
