"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")
_ENV_FILES = (f".env.{_ENVIRONMENT}", ".env")


class Settings(BaseSettings):
    """Backend settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    storage_bucket: str = "submissions"
    target_folder_name: str = "Photo Illusions Submissions"
    max_upload_bytes: int = 10 * 1024 * 1024
    thumbnail_size: int = 400
    cors_allow_origins: str = "*"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(env_file=_ENV_FILES, extra="ignore")


class ClientSettings(BaseSettings):
    """Kiosk and dashboard settings loaded from environment variables."""

    intake_api_base_url: str = "http://localhost:3001"
    admin_token: str | None = None
    dashboard_password: str | None = None
    openai_api_key: str | None = None
    openai_model: str = "gpt-5.2"
    camera_index: int = 0
    camera_fallback_indexes: str | None = None
    camera_width: int | None = None
    camera_height: int | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(env_file=_ENV_FILES, extra="ignore")


def parse_csv_list(raw: str | None) -> list[str]:
    """Parse a comma-separated setting into trimmed, non-empty values."""
    if raw is None:
        return []
    return [chunk.strip() for chunk in raw.split(",") if chunk.strip()]


def parse_index_list(raw: str | None) -> list[int]:
    """Parse comma-separated camera device indexes, skipping junk."""
    return [int(value) for value in parse_csv_list(raw) if value.isdigit()]
