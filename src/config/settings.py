# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for engine-wide defaults. Per-call values live in
api.models.QueryConfig; whatever a QueryConfig leaves unset is filled from
here once, by api.facade.resolve_query_config.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Engine settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Aggregation ===
    default_word_count_field: str = "word-count"
    default_year_field: str = "year"
    default_group_sort_mode: Literal["alphabetical", "count-desc", "count-asc"] = (
        "count-desc"
    )

    # === Presentation helpers ===
    default_page_size: int = 50
    array_display_limit: int = 3
    group_thousands: bool = True

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("default_word_count_field", "default_year_field")
    @classmethod
    def validate_field_key(cls, v: str) -> str:
        """Field keys must be non-blank."""
        if not v.strip():
            raise ValueError("field key must not be blank")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.default_page_size <= 0:
            errors.append("DEFAULT_PAGE_SIZE must be > 0")

        if self.array_display_limit < 0:
            errors.append("ARRAY_DISPLAY_LIMIT must be >= 0")

        if self.log_retention < 0:
            errors.append("LOG_RETENTION must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-call config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
