"""Shared cache types and exceptions."""

from enum import Enum


class CacheType(str, Enum):
    """Storage medium backing a cache namespace."""

    MEMORY = "memory"    # In-process map, values kept as objects
    LOCAL = "local"      # SQLite file on disk, text payloads
    SESSION = "session"  # In-memory SQLite for the process lifetime, text payloads


class CacheError(Exception):
    """Base class for cache errors."""


class CacheConfigError(CacheError, ValueError):
    """Cache was constructed with invalid options."""


class CacheDisposedError(CacheError, RuntimeError):
    """Cache was used after dispose()."""


def resolve_cache_type(value: "CacheType | str") -> CacheType:
    """
    Coerce a storage selector to CacheType.

    Raises:
        CacheConfigError: If the selector names no supported storage
    """
    try:
        return CacheType(value)
    except ValueError:
        supported = ", ".join(t.value for t in CacheType)
        raise CacheConfigError(
            f"Unsupported storage type: {value!r} (expected one of: {supported})"
        ) from None


__all__ = [
    "CacheType",
    "CacheError",
    "CacheConfigError",
    "CacheDisposedError",
    "resolve_cache_type",
]
