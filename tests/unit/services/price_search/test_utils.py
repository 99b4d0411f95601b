"""Test price parsing helpers."""

import pytest

from pricecompare.services.price_search.utils import normalize_whitespace, parse_price


@pytest.mark.parametrize(
    "text, expected",
    [
        ("₹1,23,456.50", 123456.50),
        ("₹69,900.00", 69900.0),
        ("INR 499", 499.0),
        ("$1,299", 1299.0),
        ("  ₹ 64,999 ", 64999.0),
    ],
)
def test_parse_price_strips_currency_and_thousands_separators(text, expected):
    assert parse_price(text) == expected


@pytest.mark.parametrize("text", [None, "", "Not available", "₹", "...", "1.2.3"])
def test_parse_price_returns_none_for_unusable_text(text):
    assert parse_price(text) is None


def test_parse_price_is_idempotent_on_its_output():
    value = parse_price("₹1,23,456.50")
    assert parse_price(str(value)) == value


def test_parse_price_rejects_non_finite_values():
    assert parse_price("9" * 400) is None


def test_normalize_whitespace_collapses_runs():
    assert normalize_whitespace("  Apple \n iPhone\t15  ") == "Apple iPhone 15"
