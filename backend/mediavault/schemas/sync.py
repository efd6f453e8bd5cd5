"""Sync configuration, upload result and status schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, field_validator

from mediavault.exceptions import ConfigurationMissing

UploadKind = Literal["media", "thumbnail"]


class SyncConfig(BaseModel):
    """Everything the GitHub clients need, passed in explicitly."""

    token: str = ""
    owner: str = ""
    repo: str = ""
    branch: str = "main"
    api_url: str = "https://api.github.com"
    media_path: str = "media/"
    thumbnail_path: str = "thumbnails/"
    timeout: float = 60.0
    max_attempts: int = 3
    retry_delay: float = 1.0

    @field_validator("media_path", "thumbnail_path")
    @classmethod
    def _trailing_slash(cls, value: str) -> str:
        value = value.lstrip("/")
        if value and not value.endswith("/"):
            value += "/"
        return value

    @field_validator("api_url")
    @classmethod
    def _strip_api_url(cls, value: str) -> str:
        return value.rstrip("/")

    def missing_fields(self) -> list[str]:
        return [f for f in ("token", "owner", "repo") if not getattr(self, f)]

    def ensure_complete(self) -> None:
        missing = self.missing_fields()
        if missing:
            raise ConfigurationMissing(missing)

    def path_for(self, kind: UploadKind, file_name: str) -> str:
        prefix = self.thumbnail_path if kind == "thumbnail" else self.media_path
        return f"{prefix}{file_name}"


class UploadResult(BaseModel):
    """Outcome of one successful upload."""
    path: str
    commit_sha: str | None = None
    attempts: int = 1
    bootstrap: bool = False


class SyncStatus(BaseModel):
    """Current sync status."""
    configured: bool = False
    repository: str | None = None
    branch: str = "main"
    local_files: int = 0
    uploads_succeeded: int = 0
    uploads_failed: int = 0
    last_upload: datetime | None = None


class SyncLogItem(BaseModel):
    """One upload history entry."""
    id: str
    file_id: str
    remote_path: str
    status: str
    commit_sha: str | None = None
    attempts: int = 0
    duration_ms: int | None = None
    error_msg: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
