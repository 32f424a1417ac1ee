"""Presentation helpers: CSV rendering, currency and month names."""

from __future__ import annotations

import re
from typing import Iterable, Optional, Tuple

from .aggregation import month_bounds
from .models import Expense

CSV_HEADER = "id,amount,category,description,date,created_at"
MONTH_PATTERN = re.compile(r"^([0-9]{4})-([0-9]{2})$")
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def format_number(value: float) -> str:
    """Render integral floats without a trailing ``.0``."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def quote_field(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def expenses_to_csv(expenses: Iterable[Expense]) -> str:
    rows = [
        ",".join(
            [
                str(expense.id),
                format_number(expense.amount),
                expense.category,
                quote_field(expense.description),
                expense.date,
                expense.created_at,
            ]
        )
        for expense in expenses
    ]
    return CSV_HEADER + "\n" + "\n".join(rows)


def format_currency(amount: float) -> str:
    return f"${amount:.2f}"


def month_name(month: int) -> str:
    if isinstance(month, int) and 1 <= month <= 12:
        return MONTH_NAMES[month - 1]
    return "Unknown"


def parse_month(value: Optional[str]) -> Optional[Tuple[str, str]]:
    """Turn ``YYYY-MM`` into its first and last day, or None if not that shape."""
    if not value:
        return None
    match = MONTH_PATTERN.fullmatch(value)
    if not match:
        return None
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or year < 1:
        return None
    return month_bounds(year, month)
