"""Tests for threshold literal parsers."""

from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta, timezone

import pytest

from appvalidator.domain.literals import (
    HOUR,
    MAX_INT64,
    MAX_UINT64,
    MILLISECOND,
    MINUTE,
    SECOND,
    as_aware,
    duration_nanoseconds,
    format_timestamp,
    parse_duration,
    parse_float,
    parse_int,
    parse_timestamp,
    parse_uint,
)


class TestParseIntegers:
    def test_uint(self) -> None:
        assert parse_uint("10") == 10
        assert parse_uint(str(MAX_UINT64)) == MAX_UINT64

    @pytest.mark.parametrize("literal", ["", "-1", "+1", " 1", "1_000", "abc", str(MAX_UINT64 + 1)])
    def test_uint_rejects(self, literal: str) -> None:
        with pytest.raises(ValueError):
            parse_uint(literal)

    def test_int(self) -> None:
        assert parse_int("-10") == -10
        assert parse_int("+7") == 7
        assert parse_int(str(MAX_INT64)) == MAX_INT64

    @pytest.mark.parametrize("literal", ["", "1.5", "1e3", "0x10", str(MAX_INT64 + 1)])
    def test_int_rejects(self, literal: str) -> None:
        with pytest.raises(ValueError):
            parse_int(literal)


class TestParseFloat:
    @pytest.mark.parametrize(
        ("literal", "expected"),
        [
            ("1.5", 1.5),
            ("-2", -2.0),
            (".5", 0.5),
            ("5.", 5.0),
            ("1e3", 1000.0),
            ("0x1p-2", 0.25),
        ],
    )
    def test_accepts(self, literal: str, expected: float) -> None:
        assert parse_float(literal) == expected

    def test_special_values(self) -> None:
        assert parse_float("inf") == math.inf
        assert parse_float("-Infinity") == -math.inf
        assert math.isnan(parse_float("NaN"))

    @pytest.mark.parametrize("literal", ["", "abc", "1.2.3", "1e", "1e999"])
    def test_rejects(self, literal: str) -> None:
        with pytest.raises(ValueError):
            parse_float(literal)


class TestParseDuration:
    @pytest.mark.parametrize(
        ("literal", "expected"),
        [
            ("0", 0),
            ("300ms", 300 * MILLISECOND),
            ("1h", HOUR),
            ("2h45m", 2 * HOUR + 45 * MINUTE),
            ("1.5s", 1500 * MILLISECOND),
            ("-1.5h", -(HOUR + 30 * MINUTE)),
            ("+5s", 5 * SECOND),
            ("1µs", 1000),
            ("1us", 1000),
            ("7ns", 7),
        ],
    )
    def test_accepts(self, literal: str, expected: int) -> None:
        assert parse_duration(literal) == expected

    @pytest.mark.parametrize("literal", ["", "10", "1x", "h", ".s", "-", "1.2.3s", "3000000h"])
    def test_rejects(self, literal: str) -> None:
        with pytest.raises(ValueError):
            parse_duration(literal)


class TestParseTimestamp:
    def test_offset(self) -> None:
        ts = parse_timestamp("2024-03-01T12:30:00+02:00")
        assert ts == datetime(2024, 3, 1, 10, 30, tzinfo=UTC)
        assert ts.utcoffset() == timedelta(hours=2)

    def test_fraction_truncated_to_microseconds(self) -> None:
        ts = parse_timestamp("2024-03-01T12:30:00.123456789-05:00")
        assert ts.microsecond == 123456
        assert ts.tzinfo == timezone(-timedelta(hours=5))

    @pytest.mark.parametrize(
        "literal",
        [
            "2024-03-01",
            "2024-03-01T12:30:00Z",
            "2024-03-01T12:30:00",
            "2024-13-01T12:30:00+00:00",
            "2024-03-01T12:30:00+00:60",
            "2024-03-01 12:30:00+00:00",
        ],
    )
    def test_rejects(self, literal: str) -> None:
        with pytest.raises(ValueError):
            parse_timestamp(literal)

    def test_format_round_trips_layout(self) -> None:
        text = "2024-03-01T12:30:00+02:00"
        assert format_timestamp(parse_timestamp(text)) == text

    def test_naive_is_utc(self) -> None:
        assert as_aware(datetime(2024, 1, 1)).tzinfo is UTC
        assert format_timestamp(datetime(2024, 1, 1)) == "2024-01-01T00:00:00+00:00"


class TestDurationNanoseconds:
    def test_timedelta(self) -> None:
        assert duration_nanoseconds(timedelta(days=1, microseconds=5)) == 24 * HOUR + 5000

    def test_int_passthrough(self) -> None:
        assert duration_nanoseconds(42) == 42
