"""Library routes: local records merged with the repository listing."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from mediavault.api.deps import http_error
from mediavault.exceptions import MediaVaultError, RemoteError
from mediavault.schemas.files import FileItem, LibraryResponse
from mediavault.services import get_library_client, get_local_store
from mediavault.services.reconciler import combine_and_deduplicate_files
from mediavault.utils.filenames import strip_extension

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=LibraryResponse)
async def library():
    """Deduplicated, newest-first view. Remote failures degrade to local only."""
    library_client = get_library_client()
    try:
        local = await get_local_store().list_files()
    except MediaVaultError as e:
        raise http_error(e)

    remote = []
    remote_error = None
    if not library_client.config.missing_fields():
        try:
            remote = await library_client.fetch_remote_files()
        except RemoteError as e:
            logger.warning("Remote listing failed, showing local files only: %s", e)
            remote_error = str(e)

    combined = combine_and_deduplicate_files(local, remote)
    # Handles of records left out of the view (thumbnails) never reach the caller.
    returned = {f.url for f in combined if f.is_local}
    store = get_local_store()
    for record in local:
        if record.url not in returned:
            store.revoke_handle(record.url)
    return LibraryResponse(
        files=[FileItem.model_validate(f.model_dump()) for f in combined],
        remote_error=remote_error,
    )


@router.get("/thumbnails")
async def thumbnails():
    """Media basename -> thumbnail location; local thumbnails win."""
    library_client = get_library_client()
    result: dict[str, dict] = {}

    if not library_client.config.missing_fields():
        try:
            remote = await library_client.fetch_remote_thumbnails()
        except RemoteError as e:
            logger.warning("Remote thumbnail listing failed: %s", e)
            remote = {}
        for base, path in remote.items():
            result[base] = {"url": path, "is_local": False}

    try:
        local = await get_local_store().list_files()
    except MediaVaultError as e:
        raise http_error(e)
    for record in local:
        if record.type == "thumbnail":
            result[strip_extension(record.name)] = {"url": record.url, "is_local": True}
        else:
            get_local_store().revoke_handle(record.url)
    return result


@router.get("/download-url")
async def download_url(path: str):
    """Fresh download URL for a repository path."""
    try:
        url = await get_library_client().resolve_download_url(path)
    except MediaVaultError as e:
        raise http_error(e)
    return {"path": path, "url": url}
