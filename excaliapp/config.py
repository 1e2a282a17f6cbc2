"""
Configuration and settings for the storage service and the drawings API.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageMode(str, Enum):
    """Runtime mode the client was built for; selects the storage backend."""

    WAILS = "wails"
    BROWSER = "browser"
    API = "api"


def _env(name: str, env_name: str) -> AliasChoices:
    return AliasChoices(name, env_name)


class Settings(BaseSettings):
    """Environment-backed settings for the API service and storage clients."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # Database for the drawings table (Postgres expected, any SQLAlchemy URL works)
    database_url: Optional[str] = Field(
        default=None, validation_alias=_env("database_url", "DATABASE_URL")
    )

    # Identity provider
    oidc_userinfo_url: Optional[str] = Field(
        default=None, validation_alias=_env("oidc_userinfo_url", "OIDC_USERINFO_URL")
    )
    oidc_timeout_seconds: float = Field(default=10.0)

    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False,
        validation_alias=_env(
            "use_in_memory_backends", "EXCALIAPP_USE_IN_MEMORY_BACKENDS"
        ),
    )

    # Client side storage selection
    storage_mode: StorageMode = Field(
        default=StorageMode.API,
        validation_alias=_env("storage_mode", "EXCALIAPP_STORAGE_MODE"),
    )
    api_base_url: str = Field(
        default="http://localhost:8000",
        validation_alias=_env("api_base_url", "EXCALIAPP_API_BASE_URL"),
    )
    api_timeout_seconds: float = Field(default=30.0)

    # Local key-value store (browser mode)
    local_store_dir: Optional[str] = Field(
        default=None,
        validation_alias=_env("local_store_dir", "EXCALIAPP_LOCAL_STORE_DIR"),
    )
    redis_url: Optional[str] = Field(
        default=None, validation_alias=_env("redis_url", "REDIS_URL")
    )

    # Desktop bridge (wails mode)
    desktop_data_dir: Optional[str] = Field(
        default=None,
        validation_alias=_env("desktop_data_dir", "EXCALIAPP_DESKTOP_DATA_DIR"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
