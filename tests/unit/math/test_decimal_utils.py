"""Tests for token amount parsing and formatting."""

import pytest

from smartroute.exceptions import InvalidInputError
from smartroute.math.decimal_utils import convert_decimals, format_amount, parse_amount


class TestParseAmount:
    def test_whole_amount(self):
        assert parse_amount("1000", 6) == 1000 * 10**6

    def test_fractional_amount(self):
        assert parse_amount("1.5", 18) == 15 * 10**17

    def test_leading_and_trailing_dot(self):
        assert parse_amount(".5", 1) == 5
        assert parse_amount("5.", 2) == 500

    @pytest.mark.parametrize("value", ["", ".", "0", "0.0", "000"])
    def test_zero_forms(self, value):
        assert parse_amount(value, 18) == 0

    def test_trailing_zeros_beyond_decimals_allowed(self):
        assert parse_amount("1.1000000", 6) == 1_100_000

    def test_too_many_fractional_digits(self):
        with pytest.raises(InvalidInputError):
            parse_amount("1.1234567", 6)

    @pytest.mark.parametrize("value", ["abc", "-1", "1e18", "1.2.3", "1,5"])
    def test_malformed(self, value):
        with pytest.raises(InvalidInputError):
            parse_amount(value, 18)

    @pytest.mark.parametrize("decimals", [-1, 78])
    def test_invalid_decimals(self, decimals):
        with pytest.raises(InvalidInputError):
            parse_amount("1", decimals)

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            parse_amount("x", 18)

    def test_no_float_drift(self):
        """0.1 + 0.2 style inputs parse exactly."""
        assert parse_amount("0.3", 18) == 3 * 10**17
        assert parse_amount("123456789.123456789123456789", 18) == 123456789123456789123456789


class TestFormatAmount:
    def test_zero(self):
        assert format_amount(0, 18) == "0"

    def test_whole(self):
        assert format_amount(10**18, 18) == "1"

    def test_strips_trailing_zeros(self):
        assert format_amount(1_500_000, 6) == "1.5"

    def test_six_fractional_digits(self):
        assert format_amount(1234567891234, 9) == "1234.567891"

    def test_smallest_plain_value(self):
        assert format_amount(1, 6) == "0.000001"

    def test_tiny_value_uses_scientific(self):
        assert format_amount(1, 18) == "1.00e-18"


class TestConvertDecimals:
    def test_same_decimals(self):
        assert convert_decimals(123, 18, 18) == 123

    def test_scale_down(self):
        assert convert_decimals(10**18, 18, 6) == 10**6

    def test_scale_up(self):
        assert convert_decimals(1, 6, 18) == 10**12

    def test_scale_down_truncates(self):
        assert convert_decimals(1_234_567, 6, 2) == 123
