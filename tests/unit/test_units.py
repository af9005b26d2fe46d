"""Tests for decimal string <-> scaled amount conversion."""

import pytest

from exchange.units import format_amount, parse_amount


class TestParseAmount:
    """Tests for parse_amount."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("1", 1_000_000),
            ("1.5", 1_500_000),
            ("0.000001", 1),
            (".25", 250_000),
            ("5.", 5_000_000),
            ("0", 0),
            ("123456.654321", 123_456_654_321),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_amount(text) == expected

    def test_surrounding_whitespace_ignored(self):
        assert parse_amount(" 2 ") == 2_000_000

    @pytest.mark.parametrize("text", ["", ".", "abc", "-1", "1.2.3", "1e6", "0.0000001"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_amount(text)

    def test_large_value_is_exact(self):
        """No float rounding on large inputs."""
        assert parse_amount("12345678901234567890.123456") == 12345678901234567890123456


class TestFormatAmount:
    """Tests for format_amount."""

    def test_whole(self):
        assert format_amount(2_000_000) == "2"

    def test_fraction(self):
        assert format_amount(1_500_000) == "1.5"

    def test_smallest_unit(self):
        assert format_amount(1) == "0.000001"

    def test_zero(self):
        assert format_amount(0) == "0"

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            format_amount(-1)

    def test_round_trip_preserves_value(self):
        assert parse_amount(format_amount(187_500)) == 187_500
