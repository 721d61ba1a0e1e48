"""Configuration models for the list aggregation service."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, PositiveInt, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment settings for list aggregation."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    database_url: str = Field(..., alias="CURATION_DATABASE_URL", description="Lists/articles database DSN.")
    dedup_redis_url: Optional[str] = Field(None, alias="DEDUP_REDIS_URL", description="Redis DSN for shared dedup oracles.")
    dedup_key_prefix: str = Field("dedup", alias="DEDUP_KEY_PREFIX", description="Redis key prefix for dedup sets.")
    dedup_ttl_seconds: PositiveInt = Field(3600, alias="DEDUP_TTL_SECONDS", description="Dedup set TTL (seconds).")
    default_list_limit: PositiveInt = Field(20, alias="DEFAULT_LIST_LIMIT", description="Limit for lists created without one.")
    auto_page_size: PositiveInt = Field(50, alias="AUTO_PAGE_SIZE", description="Max rows per auto list fetch (<=500).")
    skip_dangling_references: bool = Field(
        True,
        alias="SKIP_DANGLING_REFERENCES",
        description="Skip manual entries whose item is missing instead of failing.",
    )
    structlog_level: str = Field("INFO", alias="STRUCTLOG_LEVEL", description="Structured log level.")
    log_json: bool = Field(False, alias="LOG_JSON", description="Emit logs as JSON lines.")

    @field_validator("database_url")
    @classmethod
    def _validate_database_url(cls, value: str) -> str:
        if "://" not in value:
            raise ValueError("CURATION_DATABASE_URL must be a valid DSN string.")
        return value

    @field_validator("dedup_redis_url")
    @classmethod
    def _normalize_redis_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        url = value.strip()
        return url or None

    @field_validator("dedup_key_prefix")
    @classmethod
    def _validate_prefix(cls, value: str) -> str:
        prefix = value.strip().rstrip(":")
        if not prefix:
            raise ValueError("DEDUP_KEY_PREFIX must not be blank.")
        return prefix

    @field_validator("auto_page_size")
    @classmethod
    def _validate_page_size(cls, v: int) -> int:
        if v > 500:
            raise ValueError("AUTO_PAGE_SIZE must be 500 or less.")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Return a Settings instance built from the environment."""
    try:
        return Settings()
    except ValidationError as exc:
        raise RuntimeError(f"Environment validation failed: {exc}") from exc


def reset_settings_cache() -> None:
    """Clear the Settings LRU cache (for tests)."""
    get_settings.cache_clear()  # type: ignore[attr-defined]
