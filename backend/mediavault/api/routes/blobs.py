"""Transient content handles handed out by file listings."""

from fastapi import APIRouter, HTTPException, Response

from mediavault.api.deps import http_error
from mediavault.exceptions import MediaVaultError
from mediavault.services import get_local_store

router = APIRouter()


@router.get("/{token}")
async def read_handle(token: str):
    """Serve the content behind a live handle."""
    store = get_local_store()
    file_id = store.resolve_handle(token)
    if file_id is None:
        raise HTTPException(404, "Handle revoked or unknown")
    try:
        record = await store.get_file(file_id)
    except MediaVaultError as e:
        raise http_error(e)
    if record is None:
        raise HTTPException(404, f"File not found: {file_id}")
    return Response(content=record.content, media_type=record.mime_type)


@router.delete("/{token}", status_code=204)
async def revoke_handle(token: str):
    get_local_store().revoke_handle(token)
    return Response(status_code=204)
