"""Newest-first ordering of library records."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Iterable, TypeVar

from mediavault.utils.filenames import parse_media_file_name

T = TypeVar("T")

# Same-day files are ordered by ``created`` scaled down far enough that the
# offset stays well below one day (86_400_000 ms).
CREATED_TIEBREAK_DIVISOR = 1_000_000


def embedded_date(name: str) -> date | None:
    """Date from a ``Category_Title_Author_YYYY-MM-DD.ext`` name, if any."""
    parsed = parse_media_file_name(name)
    if parsed is None:
        return None
    try:
        return date.fromisoformat(parsed.date)
    except ValueError:
        return None


def _date_timestamp_ms(day: date) -> int:
    midnight = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return int(midnight.timestamp() * 1000)


def sort_key(record) -> tuple[float, bool, float]:
    """Ascending sort key that yields newest-first order.

    Primary: embedded date (plus a small ``created`` offset) or ``created``.
    Then local before remote, then raw ``created``.
    """
    created = record.created or 0
    day = embedded_date(record.name)
    if day is not None:
        primary = _date_timestamp_ms(day) + created / CREATED_TIEBREAK_DIVISOR
    else:
        primary = created
    is_local = bool(getattr(record, "is_local", False))
    return (-primary, not is_local, -created)


def sort_files_by_date(records: Iterable[T]) -> list[T]:
    """Return a new list ordered newest first.

    ``sorted`` is stable, so records tied on every key keep input order.
    """
    return sorted(records, key=sort_key)
