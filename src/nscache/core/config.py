"""Configuration Management."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

from .hash import Algorithm
from ..types import CacheType

# Load environment variables from .env file
load_dotenv()

DEFAULT_TTL_MS = 3_600_000


class Settings(BaseSettings):
    """Library defaults from environment."""

    model_config = SettingsConfigDict(
        env_prefix="NSCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # Cache defaults
    default_storage: CacheType = Field(default=CacheType.MEMORY, description="Storage used when none is given")
    default_ttl_ms: float = Field(default=DEFAULT_TTL_MS, description="Entry TTL in milliseconds (<= 0 disables)")
    hash_algorithm: Algorithm = Field(default=Algorithm.XXHASH64, description="Storage key hash")

    # Persistent storage
    local_db_path: Path = Field(
        default=Path(".nscache") / "local.db", description="SQLite file backing the local storage"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Use JSON log format")

    # Metrics
    enable_metrics: bool = Field(default=True, description="Record Prometheus metrics")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
