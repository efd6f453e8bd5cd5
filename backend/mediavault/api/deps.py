"""Shared route helpers: domain errors to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from mediavault.exceptions import (
    ConfigurationMissing,
    Conflict,
    MediaVaultError,
    NotFound,
    RemoteError,
    StorageUnavailable,
    Unprocessable,
)

logger = logging.getLogger(__name__)


def http_error(exc: MediaVaultError) -> HTTPException:
    """Translate a MediaVault error into an HTTPException."""
    if isinstance(exc, NotFound):
        return HTTPException(status.HTTP_404_NOT_FOUND, str(exc))
    if isinstance(exc, ConfigurationMissing):
        return HTTPException(status.HTTP_400_BAD_REQUEST, str(exc))
    if isinstance(exc, StorageUnavailable):
        return HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, str(exc))
    if isinstance(exc, Conflict):
        return HTTPException(status.HTTP_409_CONFLICT, str(exc))
    if isinstance(exc, Unprocessable):
        return HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))
    logger.error("Request failed: %s", exc)
    if isinstance(exc, RemoteError):
        return HTTPException(status.HTTP_502_BAD_GATEWAY, str(exc))
    return HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
