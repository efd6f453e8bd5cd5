"""Sync routes: back up a record to GitHub, upload history, status."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.api.deps import http_error
from mediavault.config import settings
from mediavault.database import get_db
from mediavault.exceptions import MediaVaultError
from mediavault.schemas.sync import SyncLogItem, SyncStatus
from mediavault.services import get_local_store, get_sync_client, get_upload_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/status", response_model=SyncStatus)
async def sync_status(db: AsyncSession = Depends(get_db)):
    """Configuration plus aggregated upload history."""
    config = get_sync_client().config
    service = get_upload_service()
    counts = await service.counts(db)
    configured = not config.missing_fields()
    return SyncStatus(
        configured=configured,
        repository=f"{config.owner}/{config.repo}" if configured else None,
        branch=config.branch,
        local_files=await get_local_store().count_files(),
        uploads_succeeded=counts.get("success", 0),
        uploads_failed=counts.get("failed", 0),
        last_upload=await service.last_upload(db),
    )


@router.get("/log", response_model=list[SyncLogItem])
async def sync_log(limit: int = 50, db: AsyncSession = Depends(get_db)):
    """Most recent uploads first."""
    entries = await get_upload_service().history(db, limit=min(limit, settings.sync_log_max_entries))
    return [SyncLogItem.model_validate(e) for e in entries]


@router.post("/{file_id}")
async def upload(file_id: str, remove_local: bool = False, db: AsyncSession = Depends(get_db)):
    """Commit a local record (and its thumbnail) to the repository."""

    def progress(p: float) -> None:
        logger.debug("Upload %s: %.0f%%", file_id, p * 100)

    try:
        outcome = await get_upload_service().upload_record(
            db, file_id, on_progress=progress, remove_local=remove_local
        )
    except MediaVaultError as e:
        raise http_error(e)

    return {
        "file_id": outcome.file_id,
        "path": outcome.media.path,
        "commit_sha": outcome.media.commit_sha,
        "attempts": outcome.media.attempts,
        "bootstrap": outcome.media.bootstrap,
        "thumbnail_path": outcome.thumbnail.path if outcome.thumbnail else None,
        "thumbnail_error": outcome.thumbnail_error,
        "removed": outcome.removed,
    }
