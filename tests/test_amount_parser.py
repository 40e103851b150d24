"""Tests for amount parser."""

from decimal import Decimal

import pytest

from fxdesk.utils.amount_parser import parse_amount, parse_optional_amount


@pytest.mark.parametrize(
    "text,expected",
    [
        ("100", Decimal("100")),
        ("1,234.56", Decimal("1234.56")),
        ("$100", Decimal("100")),
        ("100 LYD", Decimal("100")),
        ("250 د.ل", Decimal("250")),
        ("-12.5", Decimal("-12.5")),
        ("١٢٣٫٥", Decimal("123.5")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "1.2.3"])
def test_parse_amount_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)


def test_parse_optional_amount():
    assert parse_optional_amount(None) is None
    assert parse_optional_amount("  ") is None
    assert parse_optional_amount("7") == Decimal("7")
