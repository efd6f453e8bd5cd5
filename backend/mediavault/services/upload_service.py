"""Back up local records to GitHub and keep an upload history."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.exceptions import NotFound, RemoteError
from mediavault.models.sync_log import SyncLog
from mediavault.schemas.sync import UploadKind, UploadResult
from mediavault.services.local_store import LocalStore
from mediavault.services.reconciler import find_files_to_remove
from mediavault.services.remote_sync import ProgressCallback, RemoteSyncClient
from mediavault.utils.filenames import thumbnail_name_for

logger = logging.getLogger(__name__)

# Share of the overall progress bar taken by the media file; the rest
# belongs to the thumbnail.
MEDIA_PROGRESS_SHARE = 0.7


@dataclass
class UploadOutcome:
    file_id: str
    media: UploadResult
    thumbnail: UploadResult | None = None
    thumbnail_error: str | None = None
    removed: list[str] = field(default_factory=list)


class UploadService:
    """Uploads one record, then its thumbnail, logging each attempt."""

    def __init__(self, store: LocalStore, sync_client: RemoteSyncClient):
        self._store = store
        self._sync = sync_client

    async def upload_record(
        self,
        db: AsyncSession,
        file_id: str,
        on_progress: ProgressCallback | None = None,
        remove_local: bool = False,
    ) -> UploadOutcome:
        self._sync.config.ensure_complete()
        record = await self._store.get_file(file_id)
        if record is None:
            raise NotFound(file_id)
        report = on_progress or (lambda _p: None)

        media = await self._upload_logged(
            db, file_id, record.content, record.name, "media",
            lambda p: report(p * MEDIA_PROGRESS_SHARE),
        )
        outcome = UploadOutcome(file_id=file_id, media=media)

        thumbnail = None
        if record.type != "thumbnail":
            thumbnail = await self._store.get_by_name(
                thumbnail_name_for(record.name), file_type="thumbnail"
            )
        if thumbnail is not None:
            try:
                outcome.thumbnail = await self._upload_logged(
                    db, thumbnail.id, thumbnail.content, thumbnail.name, "thumbnail",
                    lambda p: report(MEDIA_PROGRESS_SHARE + p * (1 - MEDIA_PROGRESS_SHARE)),
                )
            except RemoteError as e:
                # The media file is already committed; a missing thumbnail
                # only costs the preview.
                logger.error("Thumbnail upload for %s failed: %s", record.name, e)
                outcome.thumbnail_error = str(e)
        report(1.0)

        if remove_local and outcome.thumbnail_error is not None:
            logger.warning("Keeping local copies of %s until its thumbnail is uploaded", record.name)
        elif remove_local:
            local = [record] + ([thumbnail] if thumbnail is not None else [])
            plan = find_files_to_remove(local, file_id)
            for doomed in plan.files_to_remove:
                await self._store.delete_file(doomed)
            outcome.removed = plan.files_to_remove
        return outcome

    async def _upload_logged(
        self,
        db: AsyncSession,
        file_id: str,
        content: bytes,
        name: str,
        kind: UploadKind,
        on_progress: ProgressCallback,
    ) -> UploadResult:
        started = time.monotonic()
        entry = SyncLog(
            id=str(uuid.uuid4()),
            file_id=file_id,
            remote_path=self._sync.config.path_for(kind, name),
            status="failed",
        )
        try:
            result = await self._sync.upload(content, on_progress, name, kind=kind)
        except RemoteError as e:
            entry.error_msg = str(e)
            raise
        else:
            entry.status = "success"
            entry.commit_sha = result.commit_sha
            entry.attempts = result.attempts
            return result
        finally:
            entry.duration_ms = int((time.monotonic() - started) * 1000)
            db.add(entry)
            await db.commit()

    async def history(self, db: AsyncSession, limit: int = 50) -> list[SyncLog]:
        result = await db.execute(
            select(SyncLog).order_by(SyncLog.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def counts(self, db: AsyncSession) -> dict[str, int]:
        """Upload count per status."""
        result = await db.execute(
            select(SyncLog.status, func.count()).group_by(SyncLog.status)
        )
        return {status: count for status, count in result.all()}

    async def last_upload(self, db: AsyncSession):
        result = await db.execute(select(func.max(SyncLog.created_at)))
        return result.scalar_one_or_none()
