"""File record shapes shared by the local store, the reconciler and the API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

FileType = Literal["audio", "video", "thumbnail"]
MEDIA_TYPES = ("audio", "video")


class FileMetadata(BaseModel):
    """Metadata handed in with a new recording or import.

    ``id`` is optional on creation; the local store assigns one when absent.
    ``created`` is epoch milliseconds, ``duration`` is seconds.
    """
    id: str | None = None
    name: str
    type: FileType
    mime_type: str
    size: int
    duration: float = 0
    created: int


class FileRecord(FileMetadata):
    """A stored record: metadata plus its exclusively owned content."""
    id: str
    content: bytes = Field(default=b"", repr=False)
    url: str | None = None  # transient handle, set by LocalStore.list_files


class RemoteFileEntry(BaseModel):
    """Snapshot of one object in the remote repository listing."""
    id: str
    name: str
    type: FileType
    mime_type: str
    size: int
    duration: float = 0
    created: int
    path: str | None = None
    sha: str | None = None
    url: str | None = None


class EnhancedFileRecord(BaseModel):
    """Reconciled view-model entry. Never persisted."""
    id: str
    name: str
    type: FileType
    mime_type: str
    size: int
    duration: float = 0
    created: int
    content: bytes | None = Field(default=None, repr=False, exclude=True)
    url: str | None = None
    path: str | None = None
    sha: str | None = None
    is_local: bool
    uploaded: bool | None = None


class FileUpdate(BaseModel):
    """Partial metadata update. ``id`` and content are not part of it."""
    name: str | None = None
    type: FileType | None = None
    mime_type: str | None = None
    size: int | None = None
    duration: float | None = None
    created: int | None = None


class FileItem(BaseModel):
    """File metadata for API listings (no content)."""
    id: str
    name: str
    type: FileType
    mime_type: str
    size: int
    duration: float = 0
    created: int
    url: str | None = None
    is_local: bool = True
    uploaded: bool | None = None
    path: str | None = None


class LibraryResponse(BaseModel):
    files: list[FileItem]
    remote_error: str | None = None


class DeleteResponse(BaseModel):
    deleted: list[str]
