from __future__ import annotations

import pytest

from statline.formatting import (
    FormatKind,
    display_text,
    format_value,
    is_negative,
    parse_accounting,
    parse_number,
    rule_for,
)


def test_win_percentage_uses_three_decimals_not_percent():
    assert format_value(0.853, "Win%") == "0.853"
    assert format_value("0.853", "Win% ↓") == "0.853"


@pytest.mark.parametrize("value", ["74.70%", 0.747, 74.7, "74.7"])
def test_returning_column_normalizes_to_two_decimal_percentage(value):
    assert format_value(value, "Returning") == "74.70%"


def test_returning_percentage_is_stable_on_formatted_text():
    once = format_value("74.70%", "Returning ↕")
    assert format_value(once, "Returning") == once


def test_two_decimal_families_are_independent():
    assert format_value(6.5, "Height") == "6.50"
    assert format_value(-1.234, "Value of Results") == "-1.23"
    assert rule_for("Height").name != rule_for("Underlying").name


def test_thousands_family_rounds_and_passes_comma_strings_through():
    assert rule_for("Transfers In").kind is FormatKind.THOUSANDS
    assert format_value(1234.4, "Surp Gone") == "1,234"
    assert format_value("12,345", "Exp Gone") == "12,345"
    assert format_value(2.5, "5th") == "3"


def test_zero_is_a_value_and_empty_passes_through():
    assert format_value(0, "SOS") == "0.000"
    assert format_value(None, "SOS") == ""
    assert format_value("", "SOS") == ""


def test_unmatched_values_are_returned_unchanged():
    marker = {"nested": True}
    assert format_value(marker, "Notes") is marker
    assert format_value(12.5, "PPG") == 12.5
    assert format_value("n/a", "SOS") == "n/a"


def test_parse_number_reads_leading_number():
    assert parse_number("74.70%") == pytest.approx(74.7)
    assert parse_number("12-5") == 12.0
    assert parse_number("A") is None
    assert parse_number(True) is None
    assert parse_number(float("nan")) is None


def test_accounting_negative_equals_minus_sign():
    assert parse_accounting("(5.25)") == -5.25
    assert parse_accounting("-5.25") == -5.25
    assert parse_accounting("$1,200") == 1200.0
    assert is_negative("(5.25)") and is_negative("-5.25")
    assert not is_negative("5.25")


def test_display_text_matches_page_rendering():
    assert display_text(None) == ""
    assert display_text(True) == "true"
    assert display_text(3.0) == "3"
    assert display_text(0.1) == "0.1"
    assert display_text("Duke") == "Duke"


def test_display_text_follows_browser_number_text():
    assert display_text(1e-7) == "1e-7"
    assert display_text(1.5e-5) == "0.000015"
    assert display_text(2.5e21) == "2.5e+21"
    assert display_text(float("inf")) == "Infinity"
    assert display_text(float("-inf")) == "-Infinity"
    assert display_text(float("nan")) == "NaN"


def test_non_finite_numbers_keep_infinity_text():
    assert format_value("Infinity", "SOS") == "Infinity"
    assert format_value(float("-inf"), "Height") == "-Infinity"
    assert format_value("-Infinity", "Transfers In") == "-Infinity"
