from __future__ import annotations

from finance_core.formatting import (
    CSV_HEADER,
    expenses_to_csv,
    format_currency,
    month_name,
    parse_month,
)
from finance_core.models import Expense


def _expense(description: str, amount: float = 25.5) -> Expense:
    return Expense(
        id=1,
        amount=amount,
        category="food",
        description=description,
        date="2024-11-03",
        created_at="2024-11-03T12:00:00Z",
    )


def test_csv_of_nothing_is_header_line():
    assert expenses_to_csv([]) == CSV_HEADER + "\n"


def test_csv_quotes_description_and_doubles_inner_quotes():
    csv = expenses_to_csv([_expense('He said "hi"')])
    header, row = csv.split("\n")
    assert header == "id,amount,category,description,date,created_at"
    assert row == '1,25.5,food,"He said ""hi""",2024-11-03,2024-11-03T12:00:00Z'


def test_csv_keeps_commas_inside_description():
    row = expenses_to_csv([_expense("Rice, beans", amount=40.0)]).split("\n")[1]
    assert row == '1,40,food,"Rice, beans",2024-11-03,2024-11-03T12:00:00Z'


def test_format_currency():
    assert format_currency(12.5) == "$12.50"
    assert format_currency(0) == "$0.00"


def test_month_name():
    assert month_name(1) == "January"
    assert month_name(12) == "December"
    assert month_name(13) == "Unknown"


def test_parse_month():
    assert parse_month("2024-02") == ("2024-02-01", "2024-02-29")
    assert parse_month("2024-13") is None
    assert parse_month("2024-2") is None
    assert parse_month(None) is None
