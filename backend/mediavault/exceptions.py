"""Exceptions for MediaVault storage and sync."""

from __future__ import annotations


class MediaVaultError(Exception):
    """Base exception for MediaVault operations."""


class ConfigurationMissing(MediaVaultError):
    """Raised before any I/O when required sync settings are absent."""

    def __init__(self, fields: list[str]):
        self.fields = fields
        super().__init__(
            "Upload configuration is missing: " + ", ".join(fields)
            + ". Configure the GitHub token and repository first."
        )


# --- Local store ---


class StorageUnavailable(MediaVaultError):
    """Raised when the persistent backing store cannot be opened."""


class NotFound(MediaVaultError):
    """Raised when a record id does not exist in the local store."""

    def __init__(self, file_id: str):
        self.file_id = file_id
        super().__init__(f"File not found: {file_id}")


class TransactionFailure(MediaVaultError):
    """Raised when the backing store rejects or aborts a transaction."""


# --- Remote ---


class RemoteError(MediaVaultError):
    """A remote call failed. Carries the protocol step it happened in."""

    retryable = False

    def __init__(self, step: str, status: int | None = None, body: str = ""):
        self.step = step
        self.status = status
        self.body = body
        detail = f"{status} {body}".strip() if status is not None else body
        super().__init__(f"{step}: {detail}")


class NetworkError(RemoteError):
    """The request did not complete (DNS, connect, timeout, ...)."""


class Conflict(RemoteError):
    """HTTP 409: the branch moved concurrently."""

    retryable = True


class Unprocessable(RemoteError):
    """HTTP 422: usually a stale parent or base tree."""

    retryable = True


class OtherRemoteError(RemoteError):
    """Any other non-success response."""


def error_for_status(step: str, status: int, body: str) -> RemoteError:
    """Map a non-success HTTP status onto the remote error taxonomy."""
    if status == 409:
        return Conflict(step, status, body)
    if status == 422:
        return Unprocessable(step, status, body)
    return OtherRemoteError(step, status, body)


def is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, RemoteError) and exc.retryable
