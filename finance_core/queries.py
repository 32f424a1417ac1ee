"""Filter construction for read-oriented operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .models import Expense
from .store import RecordStore
from .validators import validate_category, validate_date

DEFAULT_LIMIT = 100
MAX_LIST_LIMIT = 1000
# Large enough to mean "everything" for exports.
UNBOUNDED_LIMIT = 10_000


@dataclass(frozen=True)
class ExpenseQuery:
    """Conjunction of optional filter terms plus a row limit."""

    start_date: Optional[str] = None
    end_date: Optional[str] = None
    category: Optional[str] = None
    limit: int = DEFAULT_LIMIT

    def matches(self, expense: Expense) -> bool:
        # ISO dates compare correctly as strings.
        if self.start_date is not None and expense.date < self.start_date:
            return False
        if self.end_date is not None and expense.date > self.end_date:
            return False
        if self.category is not None and expense.category != self.category:
            return False
        return True

    def run(self, store: RecordStore) -> List[Expense]:
        """Most recent first; same-day ties go to the newest insert."""
        return store.select_many(
            self.matches,
            key=lambda expense: (expense.date, expense.id),
            reverse=True,
            limit=self.limit,
        )

    def matching(self, store: RecordStore) -> List[Expense]:
        """All matches, unordered and without the row limit, for aggregation."""
        return store.select_many(self.matches)


def build_query(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    category: Optional[str] = None,
    limit: int = DEFAULT_LIMIT,
) -> ExpenseQuery:
    """Validate each supplied term and return the combined query.

    ``None`` means the term is absent. Any other value must be valid; an
    invalid term raises ``ValidationError`` naming the wire field instead of
    being dropped.
    """
    return ExpenseQuery(
        start_date=validate_date(start_date, "startDate") if start_date is not None else None,
        end_date=validate_date(end_date, "endDate") if end_date is not None else None,
        category=validate_category(category, "category") if category is not None else None,
        limit=limit,
    )
