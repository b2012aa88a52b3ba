"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from calorie_tracker.adapters.supabase_store import DEFAULT_TABLE
from calorie_tracker.services.datastore import DEFAULT_STORAGE_PREFIX

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    storage_backend: Literal["memory", "supabase"] = "memory"
    storage_prefix: str = DEFAULT_STORAGE_PREFIX
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_table: str = DEFAULT_TABLE
    search_page_size: int = 100
    search_min_name_length: int = 3
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
