"""Data models for the finance tracker domain."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

__all__ = [
    "CATEGORIES",
    "UPDATABLE_FIELDS",
    "CategoryReport",
    "CategoryStats",
    "DailyStats",
    "Expense",
    "ExportResult",
    "MonthlySummary",
    "Totals",
    "isoformat_utc",
    "utc_now",
]

CATEGORIES = (
    "food",
    "transport",
    "entertainment",
    "bills",
    "shopping",
    "health",
    "education",
    "travel",
    "savings",
    "other",
)

UPDATABLE_FIELDS = ("amount", "category", "description", "date")


def isoformat_utc(dt: datetime) -> str:
    """Return an ISO 8601 string with trailing Z for UTC-aware datetimes."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    iso = dt.isoformat(timespec="seconds")
    # datetime.isoformat renders +00:00 for UTC; replace with the shorter Z form.
    return iso.replace("+00:00", "Z")


def utc_now() -> str:
    return isoformat_utc(datetime.now(timezone.utc))


@dataclass(frozen=True)
class Expense:
    id: int
    amount: float
    category: str
    description: str
    date: str
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the expense to JSON-friendly natives."""
        return {
            "id": self.id,
            "amount": self.amount,
            "category": self.category,
            "description": self.description,
            "date": self.date,
            "created_at": self.created_at,
        }

    @classmethod
    def from_row(cls, data: Mapping[str, Any]) -> "Expense":
        """Hydrate an Expense from a storage row or JSON-native mapping."""
        return cls(
            id=int(data["id"]),
            amount=float(data["amount"]),
            category=data["category"],
            description=data["description"],
            date=data["date"],
            created_at=data["created_at"],
        )


@dataclass(frozen=True)
class Totals:
    transaction_count: int
    total_amount: float
    average_amount: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_transactions": self.transaction_count,
            "total_spending": self.total_amount,
            "average_transaction": self.average_amount,
        }


@dataclass(frozen=True)
class CategoryStats:
    category: str
    transaction_count: int
    total_amount: float
    average_amount: float
    min_amount: float
    max_amount: float
    # None when the breakdown was computed without percentages.
    percentage: Any = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "category": self.category,
            "transaction_count": self.transaction_count,
            "total_amount": self.total_amount,
            "average_amount": self.average_amount,
            "min_amount": self.min_amount,
            "max_amount": self.max_amount,
        }
        if self.percentage is not None:
            payload["percentage"] = self.percentage
        return payload


@dataclass(frozen=True)
class DailyStats:
    date: str
    transaction_count: int
    total_amount: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "transaction_count": self.transaction_count,
            "total_amount": self.total_amount,
        }


@dataclass(frozen=True)
class CategoryReport:
    total_spending: float
    categories: List[CategoryStats] = field(default_factory=list)


@dataclass(frozen=True)
class MonthlySummary:
    year: int
    month: int
    month_name: str
    period: str
    totals: Totals
    category_breakdown: List[CategoryStats] = field(default_factory=list)
    daily_spending: List[DailyStats] = field(default_factory=list)


@dataclass(frozen=True)
class ExportResult:
    count: int
    csv: str
