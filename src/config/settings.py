# src/config/settings.py
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for backend selection, cache policy and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from docstore.cache.models import CacheTtlPolicy


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Document store ===
    store_backend: Literal["memory", "local_storage", "mongodb"] = "memory"
    mongodb_url: str = ""
    mongodb_database: str = "docstore"
    mongodb_server_selection_timeout_ms: int = 5000
    local_storage_root: Path | None = None
    local_storage_namespace: str = "localstoragedb"

    # === Cache ===
    cache_enabled: bool = True
    cache_backend: Literal["memory", "redis"] = "memory"
    cache_redis_url: str = ""
    cache_key_prefix: str = "docstore:cache:"
    cache_max_entries: int = 10_000
    cache_ttl_s: float = 300.0
    cache_find_one_ttl_s: float | None = None
    cache_find_multiple_ttl_s: float | None = None
    cache_count_ttl_s: float | None = None
    cache_collection_ttl_s: dict[str, float] = {}

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("cache_max_entries")
    @classmethod
    def validate_cache_max_entries(cls, v: int) -> int:
        """CACHE_MAX_ENTRIES must be positive."""
        if v <= 0:
            raise ValueError("cache_max_entries must be > 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.store_backend == "mongodb" and not self.mongodb_url:
            errors.append("STORE_BACKEND=mongodb requires MONGODB_URL")

        if (
            self.cache_enabled
            and self.cache_backend == "redis"
            and not self.cache_redis_url
        ):
            errors.append("CACHE_BACKEND=redis requires CACHE_REDIS_URL")

        if self.cache_ttl_s <= 0:
            errors.append("CACHE_TTL_S must be > 0")

        for name, ttl in (
            ("CACHE_FIND_ONE_TTL_S", self.cache_find_one_ttl_s),
            ("CACHE_FIND_MULTIPLE_TTL_S", self.cache_find_multiple_ttl_s),
            ("CACHE_COUNT_TTL_S", self.cache_count_ttl_s),
        ):
            if ttl is not None and ttl < 0:
                errors.append(f"{name} must be >= 0")

        for collection, ttl in self.cache_collection_ttl_s.items():
            if ttl < 0:
                errors.append(f"CACHE_COLLECTION_TTL_S[{collection}] must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    def cache_ttl_policy(self) -> CacheTtlPolicy:
        """Build the cache TTL policy from the cache_* fields."""
        operation_ttl_s = {
            operation: ttl
            for operation, ttl in (
                ("findOne", self.cache_find_one_ttl_s),
                ("findMultiple", self.cache_find_multiple_ttl_s),
                ("count", self.cache_count_ttl_s),
            )
            if ttl is not None
        }
        return CacheTtlPolicy(
            default_ttl_s=self.cache_ttl_s,
            operation_ttl_s=operation_ttl_s,
            collection_ttl_s=dict(self.cache_collection_ttl_s),
        )


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
