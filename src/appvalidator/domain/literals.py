"""Threshold literal parsers.

Each parser accepts the raw text of a rule parameter and either returns the
parsed value or raises :class:`ValueError`. The accepted grammars are
deliberately narrower than Python's own ``int()``/``float()``: no
surrounding whitespace, no ``_`` digit separators, and 64-bit range limits.

Durations are integer nanoseconds. Timestamps use the fixed layout
``YYYY-MM-DDThh:mm:ss±hh:mm`` with an optional fractional second.
"""

from __future__ import annotations

import math
import re
from datetime import UTC, datetime, timedelta, timezone

MAX_UINT64 = (1 << 64) - 1
MIN_INT64 = -(1 << 63)
MAX_INT64 = (1 << 63) - 1

TIMESTAMP_LAYOUT = "YYYY-MM-DDThh:mm:ss±hh:mm"

NANOSECOND = 1
MICROSECOND = 1_000 * NANOSECOND
MILLISECOND = 1_000 * MICROSECOND
SECOND = 1_000 * MILLISECOND
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE

DURATION_UNITS: dict[str, int] = {
    "ns": NANOSECOND,
    "us": MICROSECOND,
    "µs": MICROSECOND,  # micro sign
    "μs": MICROSECOND,  # greek small letter mu
    "ms": MILLISECOND,
    "s": SECOND,
    "m": MINUTE,
    "h": HOUR,
}

_UINT_RE = re.compile(r"[0-9]+")
_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?)|nan",
    re.IGNORECASE,
)
_HEX_FLOAT_RE = re.compile(
    r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+"
)
_DURATION_PART_RE = re.compile(r"([0-9]*)(?:\.([0-9]*))?([^0-9.]*)")
_TIMESTAMP_RE = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})"
    r"T([0-9]{2}):([0-9]{2}):([0-9]{2})"
    r"(?:[.,]([0-9]+))?"
    r"([+-])([0-9]{2}):([0-9]{2})"
)

# Fraction digits beyond this no longer change a 64-bit nanosecond count.
_MAX_FRACTION_DIGITS = 18


def parse_uint(literal: str) -> int:
    """Parse an unsigned 64-bit decimal integer."""
    if not _UINT_RE.fullmatch(literal):
        msg = f"invalid unsigned integer: {literal!r}"
        raise ValueError(msg)
    value = int(literal)
    if value > MAX_UINT64:
        msg = f"unsigned integer out of range: {literal!r}"
        raise ValueError(msg)
    return value


def parse_int(literal: str) -> int:
    """Parse a signed 64-bit decimal integer."""
    if not _INT_RE.fullmatch(literal):
        msg = f"invalid integer: {literal!r}"
        raise ValueError(msg)
    value = int(literal)
    if not MIN_INT64 <= value <= MAX_INT64:
        msg = f"integer out of range: {literal!r}"
        raise ValueError(msg)
    return value


def parse_float(literal: str) -> float:
    """Parse a 64-bit float: decimal, scientific, hex (``0x1p-2``), inf or nan.

    Finite literals that overflow to infinity are rejected.
    """
    if _HEX_FLOAT_RE.fullmatch(literal):
        try:
            value = float.fromhex(literal)
        except OverflowError as exc:
            msg = f"float out of range: {literal!r}"
            raise ValueError(msg) from exc
    elif _FLOAT_RE.fullmatch(literal):
        value = float(literal)
    else:
        msg = f"invalid float: {literal!r}"
        raise ValueError(msg)

    if math.isinf(value) and "inf" not in literal.lower():
        msg = f"float out of range: {literal!r}"
        raise ValueError(msg)
    return value


def parse_duration(literal: str) -> int:
    """Parse a duration expression into integer nanoseconds.

    A duration is an optionally signed sequence of decimal numbers, each
    with an optional fraction and a required unit suffix, such as ``300ms``,
    ``-1.5h`` or ``2h45m``. Valid units are ns, us (or µs), ms, s, m and h.
    The bare string ``0`` is also accepted.
    """
    text = literal
    negative = False
    if text[:1] in ("-", "+"):
        negative = text[0] == "-"
        text = text[1:]

    if text == "0":
        return 0
    if not text:
        msg = f"invalid duration: {literal!r}"
        raise ValueError(msg)

    total = 0
    pos = 0
    while pos < len(text):
        match = _DURATION_PART_RE.match(text, pos)
        # The pattern can match empty; a stalled position means a stray '.'
        if match is None or match.end() == pos:
            msg = f"invalid duration: {literal!r}"
            raise ValueError(msg)
        whole, fraction, unit = match.groups()
        pos = match.end()

        if not whole and not fraction:
            msg = f"invalid duration: {literal!r}"
            raise ValueError(msg)
        if not unit:
            msg = f"missing unit in duration: {literal!r}"
            raise ValueError(msg)
        scale = DURATION_UNITS.get(unit)
        if scale is None:
            msg = f"unknown unit {unit!r} in duration: {literal!r}"
            raise ValueError(msg)

        part = int(whole or "0") * scale
        if fraction:
            digits = fraction[:_MAX_FRACTION_DIGITS]
            part += int(int(digits) * (scale / 10 ** len(digits)))
        total += part
        if total > 1 << 63:
            msg = f"duration out of range: {literal!r}"
            raise ValueError(msg)

    if negative:
        return -total
    if total > MAX_INT64:
        msg = f"duration out of range: {literal!r}"
        raise ValueError(msg)
    return total


def parse_timestamp(literal: str) -> datetime:
    """Parse ``YYYY-MM-DDThh:mm:ss±hh:mm`` into an aware datetime.

    A fractional second may follow the seconds field; digits past
    microsecond precision are truncated.
    """
    match = _TIMESTAMP_RE.fullmatch(literal)
    if match is None:
        msg = f"timestamp {literal!r} does not match layout {TIMESTAMP_LAYOUT}"
        raise ValueError(msg)

    year, month, day, hour, minute, second = (int(g) for g in match.group(1, 2, 3, 4, 5, 6))
    fraction = match.group(7) or ""
    sign, offset_hours, offset_minutes = match.group(8), int(match.group(9)), int(match.group(10))
    if offset_minutes > 59:
        msg = f"time zone offset out of range: {literal!r}"
        raise ValueError(msg)

    offset = timedelta(hours=offset_hours, minutes=offset_minutes)
    if sign == "-":
        offset = -offset
    microsecond = int((fraction + "000000")[:6])
    # datetime() and timezone() raise ValueError for out-of-range fields
    return datetime(
        year,
        month,
        day,
        hour,
        minute,
        second,
        microsecond,
        tzinfo=timezone(offset),
    )


def format_timestamp(value: datetime) -> str:
    """Render *value* in the threshold layout (naive values are taken as UTC)."""
    return as_aware(value).isoformat(timespec="seconds")


def as_aware(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; aware ones are returned unchanged."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def duration_nanoseconds(value: timedelta | int) -> int:
    """Exact nanosecond count of a timedelta (ints are already nanoseconds)."""
    if isinstance(value, timedelta):
        seconds = value.days * 86_400 + value.seconds
        return seconds * SECOND + value.microseconds * MICROSECOND
    return value
