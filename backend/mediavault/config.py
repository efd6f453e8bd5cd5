"""MediaVault configuration: Pydantic BaseSettings loaded from .env."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mediavault.schemas.sync import SyncConfig


class Settings(BaseSettings):
    """Application settings."""

    app_name: str = "MediaVault"
    debug: bool = True
    log_level: str = "INFO"

    # Network
    host: str = "127.0.0.1"
    port: int = 8000
    api_prefix: str = "/api"
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:8000",
    ]

    # Storage paths (relative resolved from project root at runtime)
    data_dir: str = "./data"
    database_path: str = "./data/mediavault.db"
    max_db_connections: int = 5

    # GitHub backup target
    github_token: str = ""
    github_owner: str = ""
    github_repo: str = ""
    github_branch: str = "main"
    github_api_url: str = "https://api.github.com"
    media_path: str = "media/"
    thumbnail_path: str = "thumbnails/"

    # Upload protocol
    upload_max_attempts: int = 3
    upload_retry_delay_seconds: float = 1.0
    http_timeout_seconds: float = 60.0
    sync_log_max_entries: int = 500

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        env_prefix="MEDIAVAULT_",
        extra="ignore",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: list[str] | str) -> list[str]:
        if isinstance(value, str) and not value.startswith("["):
            return [o.strip() for o in value.split(",") if o.strip()]
        if isinstance(value, list):
            return value
        return ["http://localhost:5173"]

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Ensure data paths are absolute."""
        base = Path(__file__).resolve().parent.parent  # backend/
        for field in ("data_dir", "database_path"):
            val = getattr(self, field)
            if not Path(val).is_absolute():
                setattr(self, field, str(base / val))
        return self

    def sync_config(self) -> SyncConfig:
        """Snapshot of the GitHub settings, injected into the remote clients."""
        return SyncConfig(
            token=self.github_token,
            owner=self.github_owner,
            repo=self.github_repo,
            branch=self.github_branch,
            api_url=self.github_api_url,
            media_path=self.media_path,
            thumbnail_path=self.thumbnail_path,
            timeout=self.http_timeout_seconds,
            max_attempts=self.upload_max_attempts,
            retry_delay=self.upload_retry_delay_seconds,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
