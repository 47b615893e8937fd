"""diskttl on-disk key-value store."""

from .config import StoreConfig, load_config
from .errors import (
    BatchError,
    CorruptEntryError,
    DirectoryError,
    DiskTTLError,
    ExpiredError,
    InvalidKeyError,
    InvalidTTLError,
    NotFoundError,
)
from .schemas import ZERO_EXPIRY, Entry
from .storage import EntryStore, sort_by_expiry, sort_by_key, sort_by_value

__all__ = [
    "BatchError",
    "CorruptEntryError",
    "DirectoryError",
    "DiskTTLError",
    "Entry",
    "EntryStore",
    "ExpiredError",
    "InvalidKeyError",
    "InvalidTTLError",
    "NotFoundError",
    "StoreConfig",
    "ZERO_EXPIRY",
    "load_config",
    "sort_by_expiry",
    "sort_by_key",
    "sort_by_value",
]
