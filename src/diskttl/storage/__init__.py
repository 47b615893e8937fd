"""Hash-addressed entry files with per-entry expiry."""

from .sorting import SortOption, sort_by_expiry, sort_by_key, sort_by_value
from .store import ENTRY_SUFFIX, EntryStore

__all__ = [
    "ENTRY_SUFFIX",
    "EntryStore",
    "SortOption",
    "sort_by_expiry",
    "sort_by_key",
    "sort_by_value",
]
