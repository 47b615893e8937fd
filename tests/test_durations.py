from __future__ import annotations

from datetime import timedelta

import pytest

from diskttl_cli.durations import format_duration, parse_duration


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("1h", timedelta(hours=1)),
        ("90s", timedelta(seconds=90)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("1.5h", timedelta(minutes=90)),
        ("250ms", timedelta(milliseconds=250)),
        ("-5s", timedelta(seconds=-5)),
        ("+2m", timedelta(minutes=2)),
        ("0", timedelta(0)),
        ("2562047h", timedelta(hours=2562047)),
    ],
)
def test_parse_duration(text: str, expected: timedelta) -> None:
    assert parse_duration(text) == expected


@pytest.mark.parametrize(
    "text",
    ["", "   ", "10", "1d", "h", "1h-5m", "abc", "100000000h", "-2562048h"],
)
def test_parse_duration_rejects_malformed_input(text: str) -> None:
    with pytest.raises(ValueError):
        parse_duration(text)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (timedelta(hours=1), "1h0m0s"),
        (timedelta(hours=1, minutes=30), "1h30m0s"),
        (timedelta(minutes=1, seconds=30), "1m30s"),
        (timedelta(seconds=45), "45s"),
        (timedelta(seconds=1.5), "1.5s"),
        (timedelta(milliseconds=250), "250ms"),
        (timedelta(microseconds=1500), "1.5ms"),
        (timedelta(microseconds=500), "500µs"),
        (timedelta(microseconds=-1), "-1µs"),
        (timedelta(seconds=-5), "-5s"),
        (timedelta(0), "0s"),
    ],
)
def test_format_duration_matches_go_notation(value: timedelta, expected: str) -> None:
    assert format_duration(value) == expected
