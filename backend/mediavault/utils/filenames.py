"""Media file naming convention: ``Category_Title_Author_YYYY-MM-DD.ext``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime

MEDIA_NAME_RE = re.compile(
    r"^([^_]+)_([^_]+)_([^_]+)_([0-9]{4}-[0-9]{2}-[0-9]{2})\.[^.]+$"
)
_EXTENSION_RE = re.compile(r"\.[^.]+$")
_UNSAFE_RE = re.compile(r"[^a-zA-Z0-9\- ]")

THUMBNAIL_EXTENSION = "jpg"


@dataclass(frozen=True)
class ParsedMediaFileName:
    category: str
    title: str
    author: str
    date: str  # YYYY-MM-DD, not validated as a calendar date


def parse_media_file_name(name: str) -> ParsedMediaFileName | None:
    """Split a conventional media file name, or return None."""
    match = MEDIA_NAME_RE.match(name)
    if not match:
        return None
    return ParsedMediaFileName(*match.groups())


def format_date(value: str | date | datetime) -> str:
    """Format as YYYY-MM-DD. Unparseable strings are returned unchanged."""
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    try:
        return datetime.fromisoformat(value).strftime("%Y-%m-%d")
    except (TypeError, ValueError):
        return str(value)


def _safe(part: str) -> str:
    # Keep letters, digits, dashes and spaces, then dashes become spaces
    # so they cannot be confused with the date separator.
    return _UNSAFE_RE.sub("", part).replace("-", " ")


def format_media_file_name(
    category: str,
    title: str,
    author: str,
    date: str | datetime,
    extension: str,
) -> str:
    """Build ``Category_Title_Author_YYYY-MM-DD.ext``.

    Example: ``Music_My Song_John Doe_2024-06-07.mp3``
    """
    return (
        f"{_safe(category)}_{_safe(title)}_{_safe(author)}_"
        f"{format_date(date)}.{extension.lstrip('.')}"
    )


def strip_extension(name: str) -> str:
    return _EXTENSION_RE.sub("", name)


def extension_of(name: str) -> str:
    """Lower-cased extension without the dot, or '' when there is none."""
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def thumbnail_name_for(media_name: str) -> str:
    """Name of the thumbnail that belongs to ``media_name``."""
    return f"{strip_extension(media_name)}.{THUMBNAIL_EXTENSION}"
