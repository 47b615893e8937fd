from __future__ import annotations

import base64
import binascii
from datetime import datetime, timezone
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_serializer,
    field_validator,
)

ZERO_EXPIRY = datetime.min.replace(tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _normalize_datetime(value: datetime) -> datetime:
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Entry(BaseModel):
    """One stored record.

    On disk the members are named ``Key``, ``Value`` and ``Expiry``; the value
    is base64 text and the expiry an RFC 3339 timestamp.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    key: str = Field(alias="Key", min_length=1)
    value: bytes = Field(default=b"", alias="Value")
    expiry: datetime = Field(alias="Expiry")

    @field_validator("value", mode="before")
    @classmethod
    def decode_value(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return b""
        if info.mode == "json" and isinstance(value, str):
            try:
                return base64.b64decode(value, validate=True)
            except binascii.Error as exc:
                raise ValueError("Value must be base64 encoded") from exc
        return value

    @field_validator("expiry", mode="after")
    @classmethod
    def validate_expiry(cls, value: datetime) -> datetime:
        return _normalize_datetime(value)

    @field_serializer("value", when_used="json")
    def encode_value(self, value: bytes) -> str:
        return base64.b64encode(value).decode("ascii")

    def is_expired_at(self, now: datetime) -> bool:
        return now > self.expiry


def encode_entry(entry: Entry) -> str:
    return entry.model_dump_json(by_alias=True)


def decode_entry(payload: str | bytes | bytearray) -> Entry:
    return Entry.model_validate_json(payload)
