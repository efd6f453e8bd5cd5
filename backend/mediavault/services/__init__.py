"""Business logic services: singleton registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mediavault.config import settings

if TYPE_CHECKING:
    from mediavault.services.local_store import LocalStore
    from mediavault.services.remote_library import RemoteLibraryClient
    from mediavault.services.remote_sync import RemoteSyncClient
    from mediavault.services.upload_service import UploadService

logger = logging.getLogger(__name__)

_local_store: LocalStore | None = None
_sync_client: RemoteSyncClient | None = None
_library_client: RemoteLibraryClient | None = None
_upload_service: UploadService | None = None


async def init_services(local_store: LocalStore | None = None) -> None:
    """Create and wire up all service singletons."""
    global _local_store, _sync_client, _library_client, _upload_service

    from mediavault.services.local_store import LocalStore
    from mediavault.services.remote_library import RemoteLibraryClient
    from mediavault.services.remote_sync import RemoteSyncClient
    from mediavault.services.upload_service import UploadService

    _local_store = local_store or LocalStore(settings.database_path)
    await _local_store.open()

    sync_config = settings.sync_config()
    _sync_client = RemoteSyncClient(sync_config)
    _library_client = RemoteLibraryClient(sync_config)
    _upload_service = UploadService(_local_store, _sync_client)

    missing = sync_config.missing_fields()
    if missing:
        logger.warning(
            "GitHub sync not configured (missing %s), library is local-only",
            ", ".join(missing),
        )
    else:
        logger.info(
            "GitHub sync target: %s/%s@%s",
            sync_config.owner, sync_config.repo, sync_config.branch,
        )


async def shutdown_services() -> None:
    """Close the local store."""
    global _local_store
    if _local_store:
        await _local_store.close()
        _local_store = None


def get_local_store() -> LocalStore:
    if _local_store is None:
        raise RuntimeError("Services not initialized, call init_services() first")
    return _local_store


def get_sync_client() -> RemoteSyncClient:
    if _sync_client is None:
        raise RuntimeError("Services not initialized, call init_services() first")
    return _sync_client


def get_library_client() -> RemoteLibraryClient:
    if _library_client is None:
        raise RuntimeError("Services not initialized, call init_services() first")
    return _library_client


def get_upload_service() -> UploadService:
    if _upload_service is None:
        raise RuntimeError("Services not initialized, call init_services() first")
    return _upload_service
