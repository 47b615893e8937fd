from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from diskttl.schemas import ZERO_EXPIRY, Entry, decode_entry, encode_entry


def test_encode_uses_capitalized_members_and_base64_value() -> None:
    entry = Entry(
        key="greeting",
        value=b"hello",
        expiry=datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc),
    )

    payload = json.loads(encode_entry(entry))
    assert payload == {
        "Key": "greeting",
        "Value": "aGVsbG8=",
        "Expiry": "2026-03-01T09:00:00Z",
    }
    assert decode_entry(encode_entry(entry)) == entry


def test_decode_accepts_python_field_names() -> None:
    raw = '{"key": "k", "value": "AAE=", "expiry": "2026-03-01T09:00:00+00:00"}'

    entry = decode_entry(raw)
    assert entry.key == "k"
    assert entry.value == b"\x00\x01"


def test_naive_expiry_is_treated_as_utc() -> None:
    entry = Entry(key="k", value=b"", expiry=datetime(2026, 3, 1, 9, 0))

    assert entry.expiry.tzinfo is not None
    assert entry.expiry.utcoffset() == timedelta(0)


def test_offset_expiry_is_normalized_to_utc() -> None:
    kst = timezone(timedelta(hours=9))
    entry = Entry(key="k", value=b"", expiry=datetime(2026, 3, 1, 18, 0, tzinfo=kst))

    assert entry.expiry == datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
    assert entry.expiry.tzinfo == timezone.utc


@pytest.mark.parametrize(
    "raw",
    [
        '{"Key": "k", "Value": "***", "Expiry": "2026-03-01T09:00:00Z"}',
        '{"Key": "", "Value": "", "Expiry": "2026-03-01T09:00:00Z"}',
        '{"Key": "k", "Value": "", "Expiry": "2026-03-01T09:00:00Z", "Extra": 1}',
        '{"Key": "k", "Value": ""}',
        "[]",
        "not json",
    ],
    ids=["bad-base64", "empty-key", "extra-member", "missing-expiry", "array", "garbage"],
)
def test_decode_rejects_malformed_records(raw: str) -> None:
    with pytest.raises(ValidationError):
        decode_entry(raw)


def test_zero_expiry_is_before_any_real_time() -> None:
    entry = Entry(key="k", value=b"", expiry=ZERO_EXPIRY)

    assert entry.is_expired_at(datetime(1970, 1, 1, tzinfo=timezone.utc))
    assert ZERO_EXPIRY.year == 1
