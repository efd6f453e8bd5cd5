"""SQLAlchemy ORM models for MediaVault."""

from mediavault.models.base import Base
from mediavault.models.media_file import MediaFile
from mediavault.models.sync_log import SyncLog

__all__ = [
    "Base",
    "MediaFile",
    "SyncLog",
]
