from __future__ import annotations

from collections.abc import Callable

from diskttl.schemas import Entry

SortOption = Callable[[list[Entry]], None]


def sort_by_key(entries: list[Entry]) -> None:
    entries.sort(key=lambda entry: entry.key)


def sort_by_value(entries: list[Entry]) -> None:
    entries.sort(key=lambda entry: entry.value)


def sort_by_expiry(entries: list[Entry]) -> None:
    """Order entries soonest-expiring first; equal expiries keep their order."""
    entries.sort(key=lambda entry: entry.expiry)
