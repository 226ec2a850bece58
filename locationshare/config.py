"""Service configuration.

Values come from the environment (or a ``.env`` file in the working
directory); names are case-insensitive, e.g. ``FIREBASE_CREDENTIALS`` or
``PORT``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_project_root() -> Path:
    return Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Identity provider
    firebase_credentials: Path = get_project_root() / "config" / "serviceAccountKey.json"
    firebase_project_id: Optional[str] = None
    firebase_api_key: Optional[str] = None

    # Listener
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    # Off keeps the read endpoint returning every record regardless of the path
    # parameter; on restricts it to the requested subject.
    filter_shared_locations: bool = False

    cors_allow_origins: List[str] = ["*"]


@lru_cache
def get_settings() -> Settings:
    return Settings()
