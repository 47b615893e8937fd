from __future__ import annotations

import contextlib
import hashlib
import logging
import os
import shutil
import tempfile
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from pathlib import Path

from pydantic import ValidationError

from diskttl.config import StoreConfig
from diskttl.errors import (
    BatchError,
    CorruptEntryError,
    DirectoryError,
    DiskTTLError,
    ExpiredError,
    InvalidKeyError,
    InvalidTTLError,
    NotFoundError,
)
from diskttl.schemas import ZERO_EXPIRY, Entry, decode_entry, encode_entry, utc_now

from .sorting import SortOption

logger = logging.getLogger(__name__)

ENTRY_SUFFIX = ".json"
TEMP_PREFIX = "."


class EntryStore:
    """Hash-addressed entry files inside one directory.

    The store keeps no state besides the directory path, so any number of
    handles (in threads or processes) may point at the same directory. Writers
    of the same key race and the last rename wins.
    """

    def __init__(self, directory: str | Path, *, max_workers: int | None = None) -> None:
        if not str(directory).strip():
            raise DirectoryError("directory path is empty")
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be >= 1")

        self.directory = Path(directory)
        self.max_workers = max_workers
        created = _missing_directories(self.directory)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except (OSError, ValueError) as exc:
            for path in created:
                with contextlib.suppress(OSError):
                    path.rmdir()
            raise DirectoryError(
                f"error creating cache directory {self.directory}: {exc}"
            ) from exc

    @classmethod
    def from_config(cls, config: StoreConfig) -> EntryStore:
        return cls(config.directory_path, max_workers=config.clean_workers)

    @staticmethod
    def filename(key: str) -> str:
        return f"{hashlib.sha256(key.encode('utf-8')).hexdigest()}{ENTRY_SUFFIX}"

    def path_for(self, key: str) -> Path:
        return self.directory / self.filename(key)

    def set(self, key: str, value: bytes, ttl: timedelta | float) -> Entry:
        """Store ``value`` under ``key`` until ``now + ttl``, replacing any old entry.

        A negative ``ttl`` stores an entry that is already expired. A ``ttl``
        that pushes the expiry past the datetime range raises ``InvalidTTLError``.
        """
        self._require_key(key)
        try:
            if not isinstance(ttl, timedelta):
                ttl = timedelta(seconds=ttl)
            expiry = utc_now() + ttl
        except OverflowError as exc:
            raise InvalidTTLError(f"ttl {ttl} is out of range") from exc

        entry = Entry(key=key, value=value, expiry=expiry)
        path = self.path_for(key)
        self._write_atomic(path, encode_entry(entry))

        logger.info(
            "entry_store set entry=%s expiry=%s",
            _short(path),
            entry.expiry.isoformat(),
        )
        return entry

    put = set

    def read(self, key: str) -> Entry:
        """Load the full entry without looking at its expiry."""
        self._require_key(key)
        return self._read_file(self.path_for(key), label=f"key={key}")

    def get(self, key: str) -> bytes:
        entry = self.read(key)
        if entry.is_expired_at(utc_now()):
            logger.debug("entry_store miss entry=%s reason=expired", _short(self.path_for(key)))
            raise ExpiredError(f"entry for key={key} expired at {entry.expiry.isoformat()}")

        logger.debug("entry_store hit entry=%s", _short(self.path_for(key)))
        return entry.value

    def has(self, key: str) -> bool:
        return self.path_for(key).exists()

    def expiry(self, key: str) -> datetime:
        """Stored expiry, or ``ZERO_EXPIRY`` when the entry cannot be read."""
        try:
            return self.read(key).expiry
        except DiskTTLError:
            return ZERO_EXPIRY

    def is_expired(self, key: str) -> bool:
        return utc_now() > self.expiry(key)

    def remove(self, key: str) -> None:
        self._require_key(key)
        self._remove_file(self.path_for(key), label=f"key={key}")

    def list_entries(self, *options: SortOption) -> list[Entry]:
        """Parse every entry file, then apply ``options`` in order.

        One unreadable file fails the whole listing.
        """
        entries = [entry for _, entry in self._scan()]
        for option in options:
            option(entries)
        return entries

    def flush(self) -> int:
        """Delete every file in the directory, collecting failures as it goes."""
        removed = 0
        errors: list[BaseException] = []
        for path in self._files():
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                logger.warning("entry_store flush failed file=%s error=%s", path.name, exc)
                errors.append(DirectoryError(f"error removing {path.name}: {exc}"))
            else:
                removed += 1

        logger.info("entry_store flush removed=%d failed=%d", removed, len(errors))
        if errors:
            raise BatchError("flush", errors)
        return removed

    def clean(self) -> int:
        """Delete expired entries concurrently and return how many went away.

        Every deletion runs to completion; failures are raised together.
        """
        now = utc_now()
        expired = [path for path, entry in self._scan() if entry.is_expired_at(now)]
        if not expired:
            logger.info("entry_store clean removed=0")
            return 0

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self._remove_file, path, label=path.name) for path in expired
            ]

        errors: list[BaseException] = []
        for future in futures:
            exc = future.exception()
            if exc is not None:
                logger.warning("entry_store clean failed error=%s", exc)
                errors.append(exc)

        removed = len(expired) - len(errors)
        logger.info("entry_store clean removed=%d failed=%d", removed, len(errors))
        if errors:
            raise BatchError("clean", errors)
        return removed

    def delete(self) -> None:
        """Remove the directory and everything in it."""
        try:
            shutil.rmtree(self.directory)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise DirectoryError(f"error deleting cache directory {self.directory}: {exc}") from exc
        logger.info("entry_store delete directory=%s", self.directory)

    @staticmethod
    def _require_key(key: str) -> None:
        if not key:
            raise InvalidKeyError("key cannot be empty")

    def _files(self) -> list[Path]:
        try:
            children = sorted(self.directory.iterdir())
        except OSError as exc:
            raise DirectoryError(f"error reading directory {self.directory}: {exc}") from exc
        return [path for path in children if path.is_file()]

    def _scan(self) -> list[tuple[Path, Entry]]:
        # Hidden files are in-flight writes from _write_atomic.
        paths = [path for path in self._files() if not path.name.startswith(TEMP_PREFIX)]
        return [(path, self._read_file(path, label=path.name)) for path in paths]

    def _read_file(self, path: Path, *, label: str) -> Entry:
        try:
            raw = path.read_bytes()
        except FileNotFoundError as exc:
            raise NotFoundError(f"no entry found for {label}") from exc
        except OSError as exc:
            raise CorruptEntryError(f"error reading entry {label}: {exc}") from exc

        try:
            return decode_entry(raw)
        except ValidationError as exc:
            raise CorruptEntryError(f"error parsing entry {label}: {exc}") from exc

    def _remove_file(self, path: Path, *, label: str) -> None:
        try:
            path.unlink()
        except FileNotFoundError as exc:
            raise NotFoundError(f"no entry found for {label}") from exc
        except OSError as exc:
            raise DirectoryError(f"error removing entry {label}: {exc}") from exc
        logger.info("entry_store remove entry=%s", _short(path))

    def _write_atomic(self, path: Path, payload: str) -> None:
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self.directory, prefix=TEMP_PREFIX, suffix=".tmp"
            )
        except OSError as exc:
            raise DirectoryError(f"error writing entry {path.name}: {exc}") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fp:
                fp.write(payload)
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, path)
        except OSError as exc:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise DirectoryError(f"error writing entry {path.name}: {exc}") from exc


def _short(path: Path) -> str:
    return path.stem[:12]


def _missing_directories(directory: Path) -> list[Path]:
    """Components of ``directory`` that do not exist yet, deepest first."""
    missing = []
    for path in (directory, *directory.parents):
        if os.path.lexists(path):
            break
        missing.append(path)
    return missing
