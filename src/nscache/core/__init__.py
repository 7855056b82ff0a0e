"""Core cache machinery."""

from .config import Settings, get_settings, DEFAULT_TTL_MS
from .logging_config import configure_logging, get_logger, LogContext
from .json import parse_json, dump_json, JSONParseError
from .hash import Algorithm, hash_string, digest_length
from .envelope import Envelope, wrap, encode_envelope, decode_entry, now_ms
from .scheduler import SweepScheduler, MAX_DELAY_MS
from .cache import CacheManager, Stats, ttl_enabled


def create_container(settings: Settings | None = None):
    """Create dependency injection container (lazy import to avoid circular deps)."""
    from .container import create_container as _create_container

    return _create_container(settings)


__all__ = [
    # Config
    "Settings",
    "get_settings",
    "DEFAULT_TTL_MS",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # JSON
    "parse_json",
    "dump_json",
    "JSONParseError",
    # Hashing
    "Algorithm",
    "hash_string",
    "digest_length",
    # Entries
    "Envelope",
    "wrap",
    "encode_envelope",
    "decode_entry",
    "now_ms",
    # Expiration
    "SweepScheduler",
    "MAX_DELAY_MS",
    "ttl_enabled",
    # Caching
    "CacheManager",
    "Stats",
    # DI
    "create_container",
]
