"""Application settings parsed from environment variables and defaults."""

import json
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


def _split_list_setting(value: str | list[str] | None) -> list[str] | None:
    """Parse list settings from JSON, CSV, or list inputs; None when nothing usable."""
    if isinstance(value, list):
        cleaned = [item.strip() for item in value if isinstance(item, str) and item.strip()]
        return cleaned or None
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        try:
            parsed = json.loads(stripped)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            cleaned = [str(item).strip() for item in parsed if str(item).strip()]
            return cleaned or None
        items = [item.strip() for item in stripped.split(",") if item.strip()]
        return items or None
    return None


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = "Search Hints API"
    environment: str = "development"
    api_prefix: str = "/api"

    log_level: str = "INFO"
    cors_origins: list[str] | str = Field(default_factory=lambda: DEFAULT_CORS_ORIGINS.copy())
    health_allowlist: list[str] | str = Field(default_factory=list)

    hint_enrichment_concurrency: int = Field(default=8, ge=1)
    collaborator_timeout_seconds: float = Field(default=2.0, gt=0)
    collaborator_circuit_threshold: int = Field(default=5, ge=1)
    collaborator_base_backoff_seconds: float = 5.0
    collaborator_max_backoff_seconds: float = 120.0

    library_catalog_path: Optional[str] = None

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_cors_origins(cls, value: str | list[str] | None) -> list[str]:
        """Normalize CORS origins from JSON, CSV, or list inputs."""
        return _split_list_setting(value) or DEFAULT_CORS_ORIGINS.copy()

    @field_validator("health_allowlist", mode="before")
    @classmethod
    def _split_health_allowlist(cls, value: str | list[str] | None) -> list[str]:
        """Normalize health allowlist entries from JSON, CSV, or list inputs."""
        return _split_list_setting(value) or []

    @model_validator(mode="after")
    def _validate_backoff_window(self) -> "Settings":
        """Ensure the circuit cooldown cap is not below its starting value."""
        if self.collaborator_max_backoff_seconds < self.collaborator_base_backoff_seconds:
            msg = "COLLABORATOR_MAX_BACKOFF_SECONDS must be >= COLLABORATOR_BASE_BACKOFF_SECONDS"
            raise ValueError(msg)
        return self

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings to avoid re-parsing environment variables."""
    return Settings()


settings = get_settings()
