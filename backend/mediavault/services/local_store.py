"""Local blob + metadata store on SQLite, keyed by record id."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from pathlib import Path
from typing import Any, Mapping

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from mediavault.config import settings
from mediavault.database import create_engine, database_url, init_db
from mediavault.exceptions import NotFound, StorageUnavailable, TransactionFailure
from mediavault.models.media_file import MediaFile
from mediavault.schemas.files import MEDIA_TYPES, FileMetadata, FileRecord, FileUpdate
from mediavault.utils.filenames import strip_extension, thumbnail_name_for

logger = logging.getLogger(__name__)

HANDLE_SCHEME = "blob:"


def generate_file_id() -> str:
    """``<epoch-ms>-<random>``: informative about age, not strictly ordered."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}"


class LocalStore:
    """Async store for recordings, imports and thumbnails.

    The database is opened lazily on the first call. Each public method runs
    in its own transaction; SQLite serializes writers, so callers only need
    to sequence dependent calls.
    """

    def __init__(self, database_path: str | None = None, *, url: str | None = None):
        if url is None:
            self._path: Path | None = Path(database_path or settings.database_path)
            self._url = database_url(str(self._path))
        else:
            self._path = None
            self._url = url
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None
        self._open_lock = asyncio.Lock()
        self._handles: dict[str, str] = {}  # token -> record id
        self.schema_version: int | None = None

    @property
    def is_open(self) -> bool:
        return self._sessions is not None

    async def open(self) -> None:
        """Create the database and its table if needed. Safe to call repeatedly."""
        if self._sessions is not None:
            return
        async with self._open_lock:
            if self._sessions is not None:
                return
            engine = None
            try:
                if self._path is not None:
                    self._path.parent.mkdir(parents=True, exist_ok=True)
                engine = create_engine(
                    self._url,
                    pool_size=settings.max_db_connections,
                    echo=settings.debug and settings.log_level == "DEBUG",
                )
                self.schema_version = await init_db(engine)
            except (ImportError, OSError, SQLAlchemyError) as e:
                if engine is not None:
                    await engine.dispose()
                raise StorageUnavailable(f"Cannot open local store at {self._url}: {e}") from e

            self._engine = engine
            self._sessions = async_sessionmaker(
                engine, class_=AsyncSession, expire_on_commit=False
            )
            logger.info("Local store ready at %s (schema v%s)", self._url, self.schema_version)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._sessions = None

    async def session_factory(self) -> async_sessionmaker[AsyncSession]:
        await self.open()
        if self._sessions is None:
            raise StorageUnavailable(f"Local store at {self._url} was closed while opening")
        return self._sessions

    # --- Records ---

    async def save_file(
        self, content: bytes, metadata: FileMetadata | Mapping[str, Any]
    ) -> str:
        """Persist content and metadata in one write. Returns the record id."""
        if not isinstance(metadata, FileMetadata):
            metadata = FileMetadata.model_validate(metadata)
        file_id = metadata.id or generate_file_id()
        row = MediaFile(
            id=file_id,
            name=metadata.name,
            type=metadata.type,
            mime_type=metadata.mime_type,
            size=metadata.size,
            duration=metadata.duration,
            created=metadata.created,
            content=bytes(content),
        )

        sessions = await self.session_factory()
        try:
            async with sessions() as db, db.begin():
                await db.merge(row)
        except SQLAlchemyError as e:
            raise TransactionFailure(f"save_file {file_id}: {e}") from e

        logger.info("Saved %s '%s' (%d bytes) as %s", metadata.type, metadata.name, len(content), file_id)
        return file_id

    async def list_files(self) -> list[FileRecord]:
        """All records, each with a fresh transient handle to its content.

        Handles stay registered until ``revoke_handle`` is called.
        """
        sessions = await self.session_factory()
        try:
            async with sessions() as db:
                result = await db.execute(select(MediaFile).order_by(MediaFile.created))
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise TransactionFailure(f"list_files: {e}") from e

        return [self._to_record(row, url=self._new_handle(row.id)) for row in rows]

    async def get_file(self, file_id: str) -> FileRecord | None:
        sessions = await self.session_factory()
        try:
            async with sessions() as db:
                row = await db.get(MediaFile, file_id)
        except SQLAlchemyError as e:
            raise TransactionFailure(f"get_file {file_id}: {e}") from e
        return self._to_record(row) if row is not None else None

    async def get_by_name(self, name: str, file_type: str | None = None) -> FileRecord | None:
        """First record with ``name`` (and ``file_type``, when given)."""
        stmt = select(MediaFile).where(MediaFile.name == name)
        if file_type is not None:
            stmt = stmt.where(MediaFile.type == file_type)
        sessions = await self.session_factory()
        try:
            async with sessions() as db:
                result = await db.execute(stmt.order_by(MediaFile.created).limit(1))
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise TransactionFailure(f"get_by_name {name}: {e}") from e
        return self._to_record(row) if row is not None else None

    async def count_files(self) -> int:
        sessions = await self.session_factory()
        try:
            async with sessions() as db:
                result = await db.execute(select(func.count()).select_from(MediaFile))
                return result.scalar_one()
        except SQLAlchemyError as e:
            raise TransactionFailure(f"count_files: {e}") from e

    async def delete_file(self, file_id: str) -> None:
        """Delete a record. Deleting an absent id is a no-op."""
        sessions = await self.session_factory()
        try:
            async with sessions() as db, db.begin():
                result = await db.execute(delete(MediaFile).where(MediaFile.id == file_id))
        except SQLAlchemyError as e:
            raise TransactionFailure(f"delete_file {file_id}: {e}") from e

        if result.rowcount:
            logger.info("Deleted %s", file_id)
        else:
            logger.debug("Delete of %s: already absent", file_id)

    async def update_file(
        self, file_id: str, changes: FileUpdate | Mapping[str, Any]
    ) -> FileRecord:
        """Apply a metadata-only update. ``id`` and content never change."""
        if not isinstance(changes, FileUpdate):
            changes = FileUpdate.model_validate(dict(changes))
        fields = changes.model_dump(exclude_unset=True, exclude_none=True)

        sessions = await self.session_factory()
        try:
            async with sessions() as db, db.begin():
                row = await db.get(MediaFile, file_id)
                if row is None:
                    raise NotFound(file_id)
                for key, value in fields.items():
                    setattr(row, key, value)
                record = self._to_record(row)
        except SQLAlchemyError as e:
            raise TransactionFailure(f"update_file {file_id}: {e}") from e

        logger.info("Updated %s: %s", file_id, ", ".join(fields) or "no changes")
        return record

    async def update_file_with_thumbnail(
        self, file_id: str, changes: FileUpdate | Mapping[str, Any]
    ) -> FileRecord:
        """``update_file`` that carries a media record's thumbnail along on rename.

        Thumbnails are tied to media by basename, so ``song.jpg`` becomes
        ``renamed.jpg`` when ``song.mp3`` becomes ``renamed.mp3``.
        """
        current = await self.get_file(file_id)
        if current is None:
            raise NotFound(file_id)

        record = await self.update_file(file_id, changes)
        if current.type not in MEDIA_TYPES:
            return record
        if strip_extension(record.name) == strip_extension(current.name):
            return record

        thumbnail = await self.get_by_name(thumbnail_name_for(current.name), file_type="thumbnail")
        if thumbnail is not None:
            new_name = thumbnail_name_for(record.name)
            await self.update_file(thumbnail.id, {"name": new_name})
            logger.info("Renamed thumbnail %s -> %s", thumbnail.name, new_name)
        return record

    # --- Transient handles ---

    def _new_handle(self, file_id: str) -> str:
        token = uuid.uuid4().hex
        self._handles[token] = file_id
        return f"{HANDLE_SCHEME}{token}"

    @staticmethod
    def _token(handle: str) -> str:
        return handle[len(HANDLE_SCHEME):] if handle.startswith(HANDLE_SCHEME) else handle

    def resolve_handle(self, handle: str) -> str | None:
        """Record id behind a live handle, or None once revoked."""
        return self._handles.get(self._token(handle))

    def revoke_handle(self, handle: str) -> None:
        self._handles.pop(self._token(handle), None)

    @staticmethod
    def _to_record(row: MediaFile, url: str | None = None) -> FileRecord:
        return FileRecord(
            id=row.id,
            name=row.name,
            type=row.type,
            mime_type=row.mime_type,
            size=row.size,
            duration=row.duration or 0,
            created=row.created,
            content=row.content or b"",
            url=url,
        )
