"""
Tests for processing/numeric_parser.py

Covers: both decimal conventions, currency symbols, thousands-only values,
numeric passthrough, garbage input, and currency detection.
"""

import math

import pytest

from processing.numeric_parser import detect_currency, parse_price


# ═══════════════════════════════════════════════════════════════════════════
# parse_price — strings
# ═══════════════════════════════════════════════════════════════════════════

class TestParsePriceStrings:
    @pytest.mark.parametrize("raw, expected", [
        ("1.234,56", 1234.56),
        ("1,234.56", 1234.56),
        ("1234.56", 1234.56),
        ("10,50", 10.5),
        ("$163.308,00", 163308.0),
        ("US$ 1,250.00", 1250.0),
        ("€ 12,99", 12.99),
    ])
    def test_decimal_conventions(self, raw, expected):
        assert parse_price(raw) == pytest.approx(expected)

    def test_single_separator_with_three_digits_is_thousands(self):
        assert parse_price("1.234") == 1234.0
        assert parse_price("1,234") == 1234.0

    def test_repeated_separator_is_thousands(self):
        assert parse_price("1.234.567") == 1234567.0

    def test_one_decimal_digit_is_treated_as_grouping(self):
        """Only a lone separator followed by exactly two digits is a decimal point."""
        assert parse_price("12.5") == 125.0

    def test_plain_integer_string(self):
        assert parse_price("850") == 850.0

    @pytest.mark.parametrize("raw", ["", "   ", "abc", "n/a", "$", ".,"])
    def test_unparseable_returns_zero(self, raw):
        assert parse_price(raw) == 0.0


# ═══════════════════════════════════════════════════════════════════════════
# parse_price — non-strings
# ═══════════════════════════════════════════════════════════════════════════

class TestParsePriceNonStrings:
    def test_float_passes_through(self):
        assert parse_price(12.5) == 12.5

    def test_int_passes_through(self):
        assert parse_price(7) == 7.0

    def test_none_is_zero(self):
        assert parse_price(None) == 0.0

    def test_bool_is_zero(self):
        assert parse_price(True) == 0.0

    def test_negative_number_is_zero(self):
        assert parse_price(-5) == 0.0

    def test_nan_is_zero(self):
        assert parse_price(math.nan) == 0.0


# ═══════════════════════════════════════════════════════════════════════════
# detect_currency
# ═══════════════════════════════════════════════════════════════════════════

class TestDetectCurrency:
    @pytest.mark.parametrize("raw, expected", [
        ("US$ 10", "US$"),
        ("us$10", "US$"),
        ("R$ 5,00", "R$"),
        ("$4.500", "$"),
        ("12,50 €", "€"),
        ("£3", "£"),
    ])
    def test_markers(self, raw, expected):
        assert detect_currency(raw) == expected

    def test_no_marker(self):
        assert detect_currency("1.234,56") is None

    def test_non_string(self):
        assert detect_currency(10.5) is None
