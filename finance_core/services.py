"""Framework-agnostic business services for the finance tracker."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .aggregation import breakdown_by_category, breakdown_by_day, month_bounds, summarize
from .exceptions import EmptyUpdateError, RecordNotFoundError
from .formatting import expenses_to_csv, month_name
from .models import (
    UPDATABLE_FIELDS,
    CategoryReport,
    Expense,
    ExportResult,
    MonthlySummary,
)
from .queries import DEFAULT_LIMIT, MAX_LIST_LIMIT, UNBOUNDED_LIMIT, ExpenseQuery, build_query
from .storage import SQLiteStorage
from .store import RecordStore
from .validators import (
    ensure_known_fields,
    validate_amount,
    validate_category,
    validate_date,
    validate_int_range,
    validate_record_id,
    validate_required_str,
)

logger = logging.getLogger(__name__)

_FIELD_VALIDATORS = {
    "amount": validate_amount,
    "category": validate_category,
    "description": validate_required_str,
    "date": validate_date,
}


class ExpenseService:
    """The seven expense operations over a single record store.

    Each operation holds the store lock from validation through the final
    read-back, so operations never interleave within the process.
    """

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    # Public API -----------------------------------------------------------
    def add_expense(self, amount: object, category: object, description: object, date: object) -> Expense:
        data = {
            "amount": validate_amount(amount),
            "category": validate_category(category),
            "date": validate_date(date),
            "description": validate_required_str(description, "description"),
        }
        with self._store.lock:
            expense_id = self._store.insert(data)
            logger.info("Added expense %s", expense_id)
            # Re-read so the caller sees exactly what was stored.
            return self._get_or_raise(expense_id)

    def get_expense(self, expense_id: object) -> Expense:
        """Return an expense or raise if it does not exist."""
        return self._get_or_raise(validate_record_id(expense_id))

    def get_expenses(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        category: Optional[str] = None,
        limit: object = DEFAULT_LIMIT,
    ) -> List[Expense]:
        query = build_query(
            start_date,
            end_date,
            category,
            limit=validate_int_range(limit, "limit", 1, MAX_LIST_LIMIT),
        )
        return self._run(query)

    def get_spending_by_category(
        self, start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> CategoryReport:
        query = build_query(start_date, end_date)
        with self._store.lock:
            records = query.matching(self._store)
        total, categories = breakdown_by_category(records)
        return CategoryReport(total_spending=total, categories=categories)

    def get_monthly_summary(self, year: object, month: object) -> MonthlySummary:
        year = validate_int_range(year, "year", 2000, 2100)
        month = validate_int_range(month, "month", 1, 12)
        start, end = month_bounds(year, month)
        query = build_query(start, end)
        with self._store.lock:
            records = query.matching(self._store)
        _, categories = breakdown_by_category(records, with_percentage=False)
        return MonthlySummary(
            year=year,
            month=month,
            month_name=month_name(month),
            period=f"{start} to {end}",
            totals=summarize(records),
            category_breakdown=categories,
            daily_spending=breakdown_by_day(records),
        )

    def update_expense(self, expense_id: object, changes: Mapping[str, object]) -> Expense:
        """Replace only the fields present in ``changes``.

        A key that is present is always validated, so ``None`` is rejected
        rather than treated as "leave unchanged".
        """
        expense_id = validate_record_id(expense_id)
        with self._store.lock:
            self._get_or_raise(expense_id)
            if not changes:
                raise EmptyUpdateError(
                    "No fields to update. Provide at least one field: "
                    "amount, category, description, or date"
                )
            ensure_known_fields(changes, UPDATABLE_FIELDS)
            validated: Dict[str, object] = {}
            for field in UPDATABLE_FIELDS:
                if field in changes:
                    validated[field] = _FIELD_VALIDATORS[field](changes[field], field)
            self._store.update(expense_id, validated)
            logger.info("Updated expense %s (%s)", expense_id, ", ".join(validated))
            return self._get_or_raise(expense_id)

    def delete_expense(self, expense_id: object) -> Expense:
        expense_id = validate_record_id(expense_id)
        with self._store.lock:
            existing = self._get_or_raise(expense_id)
            self._store.delete(expense_id)
            logger.info("Deleted expense %s", expense_id)
            return existing

    def export_to_csv(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        category: Optional[str] = None,
    ) -> ExportResult:
        expenses = self._run(build_query(start_date, end_date, category, limit=UNBOUNDED_LIMIT))
        return ExportResult(count=len(expenses), csv=expenses_to_csv(expenses))

    def close(self) -> None:
        """Flush and close the underlying store."""
        self._store.close()

    # Internal helpers -----------------------------------------------------
    def _run(self, query: ExpenseQuery) -> List[Expense]:
        with self._store.lock:
            return query.run(self._store)

    def _get_or_raise(self, expense_id: int) -> Expense:
        expense = self._store.select_one(expense_id)
        if expense is None:
            raise RecordNotFoundError(f"Expense with ID {expense_id} not found")
        return expense


def open_service(db_path: Path) -> ExpenseService:
    """Initialise storage at ``db_path`` and load it fully into memory.

    Raises ``PersistenceError`` if the database cannot be opened or read.
    """
    storage = SQLiteStorage(db_path)
    storage.initialize()
    try:
        store = RecordStore(storage)
    except Exception:
        storage.close()
        raise
    logger.info("Loaded %d expenses from %s", len(store), db_path)
    return ExpenseService(store)
