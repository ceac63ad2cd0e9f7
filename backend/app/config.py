from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Clinical Time Tracker API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:5173"]

    # Client collection persistence
    storage_backend: Literal["file", "database"] = "file"
    storage_dir: str = "data"                # JSON file store location
    storage_key: str = "clients"             # key holding the serialized collection
    database_url: str = "sqlite:///./data/clinical_tracker.db"

    # CSV import / export
    max_upload_size_mb: int = 5
    display_timezone: str = "UTC"            # "Last Updated" column in exports

    # Logging: per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine SQL queries
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_import: str = "INFO"           # CSV import pipeline
    log_level_storage: str = "INFO"          # client store + key-value adapters

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
