"""Unit tests for amount rounding, formatting and parsing"""

import pytest
from pocket_ledger.domain.amounts import format_amount, format_currency, parse_amount, round_amount


@pytest.mark.parametrize("value,expected", [(2.5, 3), (2.4999, 2), (-2.5, -2), (-2.6, -3), (1_000_000.0, 1_000_000)])
def test_round_amount_half_up(value, expected):
    assert round_amount(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [(0, "0"), (999, "999"), (1_000, "1.000"), (12_000_000, "12.000.000"), (-1_500_000, "-1.500.000")],
)
def test_format_amount(value, expected):
    assert format_amount(value) == expected


def test_format_amount_custom_separator():
    assert format_amount(1_234_567, separator=",") == "1,234,567"


def test_format_currency():
    assert format_currency(1_500_000) == "Rp 1.500.000"


@pytest.mark.parametrize(
    "text,expected",
    [("Rp 1.500.000", 1_500_000), ("1500000", 1_500_000), ("12.000.000", 12_000_000), ("", 0), (None, 0), ("abc", 0)],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


def test_parse_reverses_format():
    assert parse_amount(format_currency(7_250_000)) == 7_250_000
