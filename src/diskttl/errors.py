"""Exception hierarchy for the diskttl entry store."""

from __future__ import annotations

from collections.abc import Sequence


class DiskTTLError(Exception):
    """Base exception for diskttl."""


class DirectoryError(DiskTTLError):
    """The backing directory could not be created, read or removed."""


class InvalidKeyError(DiskTTLError, ValueError):
    """An empty key was passed to an operation that needs one."""


class InvalidTTLError(DiskTTLError, ValueError):
    """The time to live puts the expiry outside the representable range."""


class NotFoundError(DiskTTLError):
    """No entry file exists for the key."""


class CorruptEntryError(DiskTTLError):
    """An entry file exists but could not be read or parsed."""


class ExpiredError(DiskTTLError):
    """The entry exists but its expiry has passed."""


class BatchError(DiskTTLError):
    """Every failure collected by a batch operation such as flush or clean."""

    def __init__(self, operation: str, errors: Sequence[BaseException]):
        self.operation = operation
        self.errors = list(errors)
        details = "; ".join(str(error) for error in self.errors)
        super().__init__(f"{operation} failed for {len(self.errors)} entries: {details}")
