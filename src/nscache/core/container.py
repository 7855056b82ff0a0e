"""Dependency Injection Container."""

from typing import Any

from injector import Binder, Injector, Module, provider, singleton

from ..storage import StorageRegistry
from ..types import CacheType
from .cache import SETTINGS_DEFAULT, CacheManager
from .config import Settings, get_settings
from .logging_config import configure_logging


class CacheFactory:
    """Builds CacheManager instances with configured defaults and a shared registry."""

    def __init__(self, settings: Settings, registry: StorageRegistry) -> None:
        self.settings = settings
        self.registry = registry

    def create(
        self,
        namespace: str,
        storage_type: CacheType | str | None = None,
        ttl: Any = SETTINGS_DEFAULT,
        **kwargs: Any,
    ) -> CacheManager:
        """
        Create a cache on the shared registry.

        Args:
            namespace: Cache namespace
            storage_type: Storage medium (default: settings.default_storage)
            ttl: TTL in milliseconds (default: settings.default_ttl_ms)
            **kwargs: Passed through to CacheManager (clock, metrics, ...)
        """
        kwargs.setdefault("hash_algorithm", self.settings.hash_algorithm)
        kwargs.setdefault("enable_metrics", self.settings.enable_metrics)
        return CacheManager(
            namespace,
            storage_type if storage_type is not None else self.settings.default_storage,
            self.settings.default_ttl_ms if ttl is SETTINGS_DEFAULT else ttl,
            registry=self.registry,
            **kwargs,
        )


class CacheModule(Module):
    """Core dependencies."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def configure(self, binder: Binder) -> None:
        """Apply logging settings once the container is built."""
        configure_logging(self.settings.log_level, self.settings.json_logs)

    @singleton
    @provider
    def provide_settings(self) -> Settings:
        return self.settings

    @singleton
    @provider
    def provide_storage_registry(self, settings: Settings) -> StorageRegistry:
        """Provide the storage registry shared by all caches in the container."""
        return StorageRegistry(settings.local_db_path)

    @singleton
    @provider
    def provide_cache_factory(self, settings: Settings, registry: StorageRegistry) -> CacheFactory:
        return CacheFactory(settings, registry)


def create_container(settings: Settings | None = None) -> Injector:
    """Create configured injector."""
    return Injector([CacheModule(settings)])
