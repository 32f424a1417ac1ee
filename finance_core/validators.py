"""Validation helpers shared across finance tracker services."""

from __future__ import annotations

import math
import re
from datetime import date
from decimal import Decimal
from typing import Iterable

from .exceptions import ValidationError
from .models import CATEGORIES

DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


def amount_is_valid(value: object) -> bool:
    # bool is an int subclass but never a meaningful amount.
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    # Judge the float that gets stored, not the input: huge ints and Decimals overflow.
    try:
        as_float = float(value)
    except (OverflowError, ValueError):
        return False
    return math.isfinite(as_float) and as_float > 0


def date_is_valid(value: object) -> bool:
    """Accept only YYYY-MM-DD strings naming a real calendar day."""
    if not isinstance(value, str) or not DATE_PATTERN.fullmatch(value):
        return False
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        return False
    # Reject anything a lenient parser would normalise to a different day.
    return parsed.isoformat() == value


def category_is_valid(value: object) -> bool:
    return isinstance(value, str) and value.lower() in CATEGORIES


def validate_amount(value: object, field: str = "amount") -> float:
    if not amount_is_valid(value):
        raise ValidationError(f"{field} must be a positive, finite number")
    return float(value)  # type: ignore[arg-type]


def validate_date(value: object, field: str = "date") -> str:
    if not date_is_valid(value):
        raise ValidationError(
            f"{field} must be a valid calendar date in YYYY-MM-DD format"
        )
    return value  # type: ignore[return-value]


def validate_category(value: object, field: str = "category") -> str:
    if not category_is_valid(value):
        raise ValidationError(f"{field} must be one of: {', '.join(CATEGORIES)}")
    return value.lower()  # type: ignore[union-attr]


def validate_required_str(value: object, field: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} cannot be empty")
    return trimmed


def validate_int_range(value: object, field: str, minimum: int, maximum: int) -> int:
    """Return value as int when it is integral and within [minimum, maximum]."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer between {minimum} and {maximum}")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or not minimum <= value <= maximum:
        raise ValidationError(f"{field} must be an integer between {minimum} and {maximum}")
    return value


def validate_record_id(value: object, field: str = "id") -> int:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer")
    return value


def ensure_known_fields(fields: Iterable[str], allowed: Iterable[str]) -> None:
    unknown = sorted(set(fields) - set(allowed))
    if unknown:
        raise ValidationError(
            f"Unknown field(s): {', '.join(unknown)}. Allowed: {', '.join(allowed)}"
        )
