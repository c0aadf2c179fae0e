"""Unit tests for daily wall-clock windows."""

from datetime import time

import pytest

from src.rs_common.errors import InvalidInputError
from src.rs_pricing.domain.time_window import format_hhmm, is_within, parse_hhmm

NIGHT_START = time(22, 0)
NIGHT_END = time(6, 0)


class TestParseHhmm:
    def test_parses_24_hour_time(self) -> None:
        assert parse_hhmm("17:30") == time(17, 30)
        assert parse_hhmm("00:00") == time(0, 0)
        assert parse_hhmm("23:59") == time(23, 59)

    @pytest.mark.parametrize("bad", ["24:00", "7:30", "12:60", "noon", "", "12-30"])
    def test_rejects_malformed(self, bad: str) -> None:
        with pytest.raises(InvalidInputError):
            parse_hhmm(bad)

    def test_rejects_non_string(self) -> None:
        with pytest.raises(InvalidInputError):
            parse_hhmm(1730)  # type: ignore[arg-type]

    def test_format(self) -> None:
        assert format_hhmm(time(6, 5)) == "06:05"


class TestNightWindowCrossingMidnight:
    @pytest.mark.parametrize(
        ("now", "expected"),
        [
            (time(21, 59), False),
            (time(22, 0), True),
            (time(23, 59), True),
            (time(0, 0), True),
            (time(5, 59), True),
            (time(6, 0), False),
            (time(12, 0), False),
        ],
    )
    def test_22_to_06(self, now: time, expected: bool) -> None:
        assert is_within(now, NIGHT_START, NIGHT_END) is expected


class TestSameDayWindow:
    def test_start_inclusive_end_exclusive(self) -> None:
        start, end = time(17, 0), time(20, 0)
        assert is_within(time(17, 0), start, end) is True
        assert is_within(time(19, 59), start, end) is True
        assert is_within(time(20, 0), start, end) is False
        assert is_within(time(16, 59), start, end) is False


def test_equal_start_and_end_is_empty() -> None:
    t = time(8, 0)
    assert is_within(t, t, t) is False
    assert is_within(time(20, 0), t, t) is False
