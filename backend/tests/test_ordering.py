"""Tests for newest-first library ordering."""

from mediavault.schemas.files import EnhancedFileRecord
from mediavault.utils.ordering import embedded_date, sort_files_by_date


def _rec(name, created, is_local=True, file_id=None):
    return EnhancedFileRecord(
        id=file_id or f"{name}-{created}-{is_local}",
        name=name,
        type="audio",
        mime_type="audio/mpeg",
        size=1,
        created=created,
        is_local=is_local,
    )


def _names(records):
    return [r.name for r in records]


def test_embedded_date_beats_created():
    old = _rec("Music_Old_Me_2024-03-10.mp3", created=9_000_000_000_000)
    new = _rec("Music_New_Me_2024-06-15.mp3", created=1)
    assert _names(sort_files_by_date([old, new])) == [new.name, old.name]


def test_same_day_larger_created_first():
    a = _rec("Music_A_Me_2024-06-15.mp3", created=1_000)
    b = _rec("Music_B_Me_2024-06-15.mp3", created=2_000_000_000)
    assert _names(sort_files_by_date([a, b])) == [b.name, a.name]


def test_undated_names_sort_by_created():
    records = [_rec("a.mp3", 10), _rec("b.mp3", 30), _rec("c.mp3", 20)]
    assert _names(sort_files_by_date(records)) == ["b.mp3", "c.mp3", "a.mp3"]


def test_local_preferred_on_tie():
    remote = _rec("same.mp3", 100, is_local=False)
    local = _rec("same.mp3", 100, is_local=True)
    result = sort_files_by_date([remote, local])
    assert [r.is_local for r in result] == [True, False]


def test_full_tie_keeps_input_order():
    first = _rec("x.mp3", 5, file_id="first")
    second = _rec("x.mp3", 5, file_id="second")
    assert [r.id for r in sort_files_by_date([first, second])] == ["first", "second"]
    assert [r.id for r in sort_files_by_date([second, first])] == ["second", "first"]


def test_input_not_mutated():
    records = [_rec("a.mp3", 1), _rec("b.mp3", 2)]
    result = sort_files_by_date(records)
    assert _names(records) == ["a.mp3", "b.mp3"]
    assert result is not records


def test_invalid_calendar_date_treated_as_undated():
    assert embedded_date("Music_A_Me_2024-13-45.mp3") is None
    bogus = _rec("Music_A_Me_2024-13-45.mp3", created=50)
    newer = _rec("plain.mp3", created=60)
    assert _names(sort_files_by_date([bogus, newer])) == ["plain.mp3", bogus.name]
