from __future__ import annotations

import re
from datetime import timedelta

# Go-style durations: "1h", "1h30m", "-5s", "1.5h", "250ms".
_DURATION_PATTERN = re.compile(r"(?:(?:\d+(?:\.\d*)?|\.\d+)(?:ns|us|µs|ms|s|m|h))+")
_COMPONENT_PATTERN = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_UNIT_MICROSECONDS = {
    "ns": 0.001,
    "us": 1,
    "µs": 1,
    "ms": 1_000,
    "s": 1_000_000,
    "m": 60_000_000,
    "h": 3_600_000_000,
}
# Largest duration Go can represent: 2**63 - 1 nanoseconds.
_MAX_MICROSECONDS = (2**63 - 1) / 1_000


def parse_duration(text: str) -> timedelta:
    raw = text.strip()
    if not raw:
        raise ValueError("duration must not be empty")

    sign = 1
    body = raw
    if body[0] in "+-":
        sign = -1 if body[0] == "-" else 1
        body = body[1:]

    if body == "0":
        return timedelta(0)
    if not _DURATION_PATTERN.fullmatch(body):
        raise ValueError(f"invalid duration: {text!r} (expected e.g. 1h, 30m, 90s)")

    microseconds = sum(
        float(number) * _UNIT_MICROSECONDS[unit]
        for number, unit in _COMPONENT_PATTERN.findall(body)
    )
    if microseconds > _MAX_MICROSECONDS:
        raise ValueError(f"invalid duration: {text!r} (out of range)")
    return timedelta(microseconds=sign * microseconds)


def format_duration(value: timedelta) -> str:
    """Render ``value`` the way Go prints a time.Duration, e.g. ``1h30m0s``."""
    total = (value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds
    if total == 0:
        return "0s"

    sign = "-" if total < 0 else ""
    total = abs(total)
    if total < 1_000:
        return f"{sign}{total}µs"
    if total < 1_000_000:
        millis, micros = divmod(total, 1_000)
        return f"{sign}{_decimal(millis, micros, 3)}ms"

    hours, rest = divmod(total, 3_600_000_000)
    minutes, rest = divmod(rest, 60_000_000)
    seconds, micros = divmod(rest, 1_000_000)
    text = f"{_decimal(seconds, micros, 6)}s"
    if hours:
        text = f"{hours}h{minutes}m{text}"
    elif minutes:
        text = f"{minutes}m{text}"
    return f"{sign}{text}"


def _decimal(whole: int, fraction: int, width: int) -> str:
    if not fraction:
        return str(whole)
    return f"{whole}.{fraction:0{width}d}".rstrip("0")
