from __future__ import annotations

import math
from decimal import Decimal

import pytest

from finance_core.exceptions import ValidationError
from finance_core.validators import (
    amount_is_valid,
    category_is_valid,
    date_is_valid,
    validate_amount,
    validate_category,
    validate_date,
    validate_int_range,
    validate_record_id,
    validate_required_str,
)


@pytest.mark.parametrize("value", [50, 0.01, 12.5, Decimal("3.20")])
def test_amount_accepts_positive_finite_numbers(value):
    assert amount_is_valid(value)


@pytest.mark.parametrize(
    "value",
    [
        -10,
        0,
        math.inf,
        -math.inf,
        math.nan,
        "50",
        None,
        True,
        Decimal("Infinity"),
        Decimal("sNaN"),
        Decimal("1e400"),
        10 ** 400,
    ],
)
def test_amount_rejects_non_positive_or_non_numeric(value):
    assert not amount_is_valid(value)


@pytest.mark.parametrize("value", [Decimal("1e400"), 10 ** 400])
def test_validate_amount_rejects_values_that_overflow_a_float(value):
    with pytest.raises(ValidationError, match="amount must be a positive, finite number"):
        validate_amount(value)


def test_date_accepts_real_calendar_day():
    assert date_is_valid("2024-11-03")
    assert date_is_valid("2024-02-29")


@pytest.mark.parametrize(
    "value",
    ["2024-13-01", "2024-02-30", "2023-02-29", "11/03/2024", "2024-1-03", "2024-11-03T00:00", "", None],
)
def test_date_rejects_malformed_or_impossible_dates(value):
    assert not date_is_valid(value)


def test_date_rejects_non_ascii_digits():
    assert not date_is_valid("２０２４-11-03")


def test_category_is_case_insensitive():
    assert category_is_valid("Food")
    assert category_is_valid("TRANSPORT")
    assert not category_is_valid("xyz")
    assert not category_is_valid(None)


def test_validate_category_lowercases():
    assert validate_category("Savings") == "savings"


def test_validate_category_names_allowed_values():
    with pytest.raises(ValidationError, match="category must be one of: food"):
        validate_category("groceries")


def test_validate_date_message_names_field():
    with pytest.raises(ValidationError, match="startDate"):
        validate_date("2024-02-30", "startDate")


def test_validate_required_str_trims_and_rejects_blank():
    assert validate_required_str("  Lunch  ", "description") == "Lunch"
    with pytest.raises(ValidationError, match="description cannot be empty"):
        validate_required_str("   ", "description")
    with pytest.raises(ValidationError, match="description must be a string"):
        validate_required_str(None, "description")


def test_validate_int_range():
    assert validate_int_range(2024, "year", 2000, 2100) == 2024
    assert validate_int_range(3.0, "month", 1, 12) == 3
    for bad in (1999, 2101, 2024.5, "2024", None, True):
        with pytest.raises(ValidationError, match="year must be an integer between 2000 and 2100"):
            validate_int_range(bad, "year", 2000, 2100)


def test_validate_record_id():
    assert validate_record_id(7) == 7
    assert validate_record_id(7.0) == 7
    with pytest.raises(ValidationError, match="id must be an integer"):
        validate_record_id("7")
