"""Merge local and remote listings; plan cascading deletes.

Everything here is pure and synchronous.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Protocol, Sequence, TypeVar

from mediavault.schemas.files import (
    MEDIA_TYPES,
    EnhancedFileRecord,
    FileRecord,
    RemoteFileEntry,
)
from mediavault.utils.filenames import thumbnail_name_for
from mediavault.utils.ordering import sort_files_by_date

logger = logging.getLogger(__name__)


class _HasId(Protocol):
    id: str


T = TypeVar("T", bound=_HasId)


@dataclass
class RemovalPlan:
    """Ids to delete, and the matching records with the thumbnail first."""
    files_to_remove: list[str]
    cleanup: list[FileRecord] = field(default_factory=list)


def combine_and_deduplicate_files(
    local: Sequence[FileRecord],
    remote: Sequence[RemoteFileEntry],
) -> list[EnhancedFileRecord]:
    """One sorted library view. Local wins on any name or id collision."""
    local_media = [
        EnhancedFileRecord(**f.model_dump(), is_local=True)
        for f in local
        if f.type in MEDIA_TYPES
    ]

    local_names = {f.name for f in local_media}
    local_ids = {f.id for f in local_media}

    remote_only = [
        EnhancedFileRecord(**r.model_dump(), is_local=False, uploaded=True)
        for r in remote
        if r.name not in local_names and r.id not in local_ids
    ]

    return sort_files_by_date(deduplicate_by_id(local_media + remote_only))


def deduplicate_by_id(items: Iterable[T]) -> list[T]:
    """Keep the first item per id, preserving order."""
    seen: set[str] = set()
    unique: list[T] = []
    for item in items:
        if item.id in seen:
            logger.warning("Duplicate file id %s, skipping duplicate", item.id)
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


def find_files_to_remove(local: Sequence[FileRecord], file_id: str) -> RemovalPlan:
    """Ids to delete when ``file_id`` goes, including its thumbnail.

    An unknown id still comes back as the single id to delete; deleting an
    absent record is harmless.
    """
    target = next((f for f in local if f.id == file_id), None)
    if target is None:
        return RemovalPlan(files_to_remove=[file_id])

    plan = RemovalPlan(files_to_remove=[file_id])
    if target.type in MEDIA_TYPES:
        thumbnail = find_thumbnail(local, target.name)
        if thumbnail is not None:
            plan.files_to_remove.append(thumbnail.id)
            plan.cleanup.append(thumbnail)

    plan.cleanup.append(target)
    return plan


def find_thumbnail(local: Iterable[FileRecord], media_name: str) -> FileRecord | None:
    """Local thumbnail record belonging to ``media_name``, if any."""
    thumb_name = thumbnail_name_for(media_name)
    return next(
        (f for f in local if f.type == "thumbnail" and f.name == thumb_name),
        None,
    )
