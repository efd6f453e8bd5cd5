"""Local file routes: save, list, edit and delete recordings."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, HTTPException, Query, Request, Response

from mediavault.api.deps import http_error
from mediavault.exceptions import MediaVaultError
from mediavault.schemas.files import (
    DeleteResponse,
    FileItem,
    FileMetadata,
    FileRecord,
    FileType,
    FileUpdate,
)
from mediavault.services import get_local_store
from mediavault.services.reconciler import find_files_to_remove

logger = logging.getLogger(__name__)
router = APIRouter()


def _item(record: FileRecord) -> FileItem:
    return FileItem.model_validate(record.model_dump(exclude={"content"}))


@router.get("", response_model=list[FileItem])
async def list_files():
    """All local records with a transient content handle each."""
    try:
        records = await get_local_store().list_files()
    except MediaVaultError as e:
        raise http_error(e)
    return [_item(r) for r in records]


@router.post("", status_code=201)
async def save_file(
    request: Request,
    name: str,
    file_type: FileType = Query(..., alias="type"),
    duration: float = 0,
    created: int | None = None,
    file_id: str | None = Query(None, alias="id"),
):
    """Store the raw request body as a new record."""
    content = await request.body()
    metadata = FileMetadata(
        id=file_id,
        name=name,
        type=file_type,
        mime_type=request.headers.get("content-type", "application/octet-stream"),
        size=len(content),
        duration=duration,
        created=created if created is not None else int(time.time() * 1000),
    )
    try:
        new_id = await get_local_store().save_file(content, metadata)
    except MediaVaultError as e:
        raise http_error(e)
    return {"id": new_id}


@router.get("/{file_id}", response_model=FileItem)
async def get_file(file_id: str):
    try:
        record = await get_local_store().get_file(file_id)
    except MediaVaultError as e:
        raise http_error(e)
    if record is None:
        raise HTTPException(404, f"File not found: {file_id}")
    return _item(record)


@router.get("/{file_id}/content")
async def get_file_content(file_id: str):
    try:
        record = await get_local_store().get_file(file_id)
    except MediaVaultError as e:
        raise http_error(e)
    if record is None:
        raise HTTPException(404, f"File not found: {file_id}")
    return Response(content=record.content, media_type=record.mime_type)


@router.patch("/{file_id}", response_model=FileItem)
async def update_file(file_id: str, changes: FileUpdate):
    """Edit metadata; content and id stay as stored. A rename carries the thumbnail along."""
    try:
        record = await get_local_store().update_file_with_thumbnail(file_id, changes)
    except MediaVaultError as e:
        raise http_error(e)
    return _item(record)


@router.delete("/{file_id}", response_model=DeleteResponse)
async def delete_file(file_id: str):
    """Delete a record together with its thumbnail."""
    store = get_local_store()
    try:
        local = await store.list_files()
        for record in local:
            store.revoke_handle(record.url)
        plan = find_files_to_remove(local, file_id)
        for doomed in plan.files_to_remove:
            await store.delete_file(doomed)
    except MediaVaultError as e:
        raise http_error(e)
    logger.info("Removed %s", ", ".join(plan.files_to_remove))
    return DeleteResponse(deleted=plan.files_to_remove)
