from __future__ import annotations

from datetime import datetime, timedelta, timezone

from diskttl.schemas import Entry
from diskttl.storage import sort_by_expiry, sort_by_key, sort_by_value

BASE_TIME = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def _entry(key: str, value: bytes, minutes: int) -> Entry:
    return Entry(key=key, value=value, expiry=BASE_TIME + timedelta(minutes=minutes))


def test_sort_by_key_is_lexicographic() -> None:
    entries = [_entry("b", b"1", 1), _entry("C", b"2", 2), _entry("a", b"3", 3)]
    sort_by_key(entries)

    assert [entry.key for entry in entries] == ["C", "a", "b"]


def test_sort_by_value_compares_raw_bytes() -> None:
    entries = [_entry("k1", b"\xff", 1), _entry("k2", b"", 2), _entry("k3", b"abc", 3)]
    sort_by_value(entries)

    assert [entry.key for entry in entries] == ["k2", "k3", "k1"]


def test_sort_by_expiry_keeps_ties_in_input_order() -> None:
    entries = [
        _entry("late", b"", 10),
        _entry("tie-b", b"", 5),
        _entry("tie-a", b"", 5),
        _entry("early", b"", 1),
    ]
    sort_by_expiry(entries)

    assert [entry.key for entry in entries] == ["early", "tie-b", "tie-a", "late"]


def test_sort_options_compose_in_order() -> None:
    entries = [
        _entry("d", b"", 5),
        _entry("c", b"", 1),
        _entry("b", b"", 5),
        _entry("a", b"", 1),
    ]
    for option in (sort_by_key, sort_by_expiry):
        option(entries)

    assert [entry.key for entry in entries] == ["a", "c", "b", "d"]
