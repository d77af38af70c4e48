from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the registry.

    Values are loaded from ``BLC_``-prefixed environment variables (or a
    ``.env`` file) and may be overridden via CLI flags.
    """

    # Emit DEBUG records for every registration and firing
    debug: bool = False

    # Validate instructions and their results at runtime
    strict: bool = False

    # Guard the event mapping with a lock; registration is otherwise expected
    # to finish before firing starts.
    thread_safe: bool = False

    log_level: str = "INFO"

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_prefix="BLC_", env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
