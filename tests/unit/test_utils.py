"""
Unit tests for token_pricer.utils.

Covers raw-unit conversion and the price string format.
"""

from decimal import Decimal

import pytest

from token_pricer.utils import format_decimal, format_units, parse_units


class TestParseUnits:
    def test_one_token_18_decimals(self):
        assert parse_units("1", 18) == 10**18

    def test_one_token_6_decimals(self):
        assert parse_units(1, 6) == 10**6

    def test_fractional_amount(self):
        assert parse_units("0.5", 6) == 500_000

    def test_zero_decimals(self):
        assert parse_units("7", 0) == 7

    def test_too_many_fractional_digits(self):
        with pytest.raises(ValueError):
            parse_units("0.1", 0)

    def test_negative_decimals(self):
        with pytest.raises(ValueError):
            parse_units("1", -1)


class TestFormatUnits:
    @pytest.mark.parametrize(
        "value,decimals,expected",
        [
            (10**18, 18, "1.0"),
            (0, 18, "0.0"),
            (1, 18, "0.000000000000000001"),
            (4_200_000_000_000_000, 18, "0.0042"),
            (1_234_500_000_000_000_000, 18, "1.2345"),
            (612_340_000_000_000_000_000, 18, "612.34"),
            (5, 0, "5.0"),
            (1_500_000, 6, "1.5"),
            (-15 * 10**17, 18, "-1.5"),
        ],
    )
    def test_ethers_compatible(self, value, decimals, expected):
        assert format_units(value, decimals) == expected


class TestFormatDecimal:
    def test_truncates_to_places(self):
        value = Decimal("1.23456789012345678912345")
        assert format_decimal(value, 18) == "1.234567890123456789"

    def test_whole_number(self):
        assert format_decimal(Decimal("2"), 18) == "2.0"

    def test_scientific_input(self):
        assert format_decimal(Decimal("6.7e-3"), 18) == "0.0067"

    def test_below_resolution(self):
        assert format_decimal(Decimal("1e-20"), 18) == "0.0"

    def test_large_value(self):
        assert format_decimal(Decimal("3.4e+38"), 18) == "340000000000000000000000000000000000000.0"

    def test_value_beyond_80_digits(self):
        rendered = format_decimal(Decimal("3.4e+293"), 18)
        whole, frac = rendered.split(".")
        assert whole == "34" + "0" * 292
        assert frac == "0"

    def test_many_places_on_large_value(self):
        rendered = format_decimal(Decimal("1.5e+62"), 255)
        assert rendered == "15" + "0" * 61 + ".0"
