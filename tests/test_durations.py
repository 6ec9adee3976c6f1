"""Tests for durations module."""

from __future__ import annotations

import pytest

from webplay.durations import parse_duration
from webplay.errors import DurationError


class TestParseDuration:
    @pytest.mark.parametrize(
        "text, seconds",
        [
            ("60s", 60.0),
            ("10s", 10.0),
            ("250ms", 0.25),
            ("1m30s", 90.0),
            ("1.5h", 5400.0),
            ("2h45m", 9900.0),
            ("0", 0.0),
            ("500us", 0.0005),
            ("500µs", 0.0005),
            ("-2s", -2.0),
            ("+3s", 3.0),
        ],
    )
    def test_valid(self, text, seconds):
        assert parse_duration(text) == pytest.approx(seconds)

    def test_missing_unit(self):
        with pytest.raises(DurationError, match="missing unit"):
            parse_duration("5")

    @pytest.mark.parametrize("text", ["", "abc", "5 s", "s", "1x", "-"])
    def test_invalid(self, text):
        with pytest.raises(DurationError):
            parse_duration(text)

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            parse_duration("soon")
