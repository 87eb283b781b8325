"""Application settings."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment settings (prefix SITE_ENGINE_)."""

    model_config = SettingsConfigDict(
        env_prefix="SITE_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Site Risk Engine"
    debug: bool = False

    # API server
    host: str = "127.0.0.1"
    port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # JSON lines instead of console rendering


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
