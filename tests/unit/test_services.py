from __future__ import annotations

from decimal import Decimal

import pytest

from finance_core.exceptions import EmptyUpdateError, RecordNotFoundError, ValidationError
from finance_core.services import open_service


def test_add_returns_stored_normalised_record(service):
    expense = service.add_expense(25.5, "FOOD", "  Lunch with team  ", "2024-11-03")

    assert expense.category == "food"
    assert expense.description == "Lunch with team"
    assert service.get_expense(expense.id) == expense


def test_add_ids_strictly_increase(service):
    ids = [service.add_expense(1, "other", "x", "2024-01-01").id for _ in range(3)]
    assert ids == sorted(ids) and len(set(ids)) == 3


@pytest.mark.parametrize(
    "kwargs, field",
    [
        ({"amount": 0}, "amount"),
        ({"amount": float("inf")}, "amount"),
        ({"amount": "12"}, "amount"),
        ({"amount": Decimal("1e400")}, "amount"),
        ({"amount": 10 ** 400}, "amount"),
        ({"category": "groceries"}, "category"),
        ({"description": "   "}, "description"),
        ({"date": "2024-02-30"}, "date"),
    ],
)
def test_add_rejects_bad_fields(service, kwargs, field):
    payload = {"amount": 5, "category": "food", "description": "ok", "date": "2024-11-03"}
    payload.update(kwargs)
    with pytest.raises(ValidationError, match=field):
        service.add_expense(**payload)
    assert service.get_expenses() == []


def test_get_expenses_orders_most_recent_first(seeded):
    dates = [expense.date for expense in seeded.get_expenses()]
    assert dates == sorted(dates, reverse=True)


def test_get_expenses_filters(seeded):
    food = seeded.get_expenses(category="Food")
    assert {expense.category for expense in food} == {"food"}
    november = seeded.get_expenses(start_date="2024-11-01", end_date="2024-11-30")
    assert len(november) == 3


def test_get_expenses_rejects_invalid_start_date(seeded):
    with pytest.raises(ValidationError, match="startDate"):
        seeded.get_expenses(start_date="2024-13-01")


@pytest.mark.parametrize("limit", [0, 1001, "10", 2.5])
def test_get_expenses_limit_bounds(seeded, limit):
    with pytest.raises(ValidationError, match="limit"):
        seeded.get_expenses(limit=limit)


def test_spending_by_category(seeded):
    report = seeded.get_spending_by_category("2024-11-01", "2024-11-30")

    assert report.total_spending == 60
    stats = {item.category: item for item in report.categories}
    assert stats["food"].transaction_count == 2
    assert stats["food"].average_amount == 15
    assert stats["food"].percentage == 50.0
    assert stats["transport"].percentage == 50.0
    assert "bills" not in stats


def test_monthly_summary(seeded):
    summary = seeded.get_monthly_summary(2024, 11)

    assert summary.month_name == "November"
    assert summary.period == "2024-11-01 to 2024-11-30"
    assert summary.totals.transaction_count == 3
    assert summary.totals.total_amount == 60
    assert summary.totals.average_amount == 20
    assert [item.category for item in summary.category_breakdown][0] in {"food", "transport"}
    assert [(day.date, day.total_amount) for day in summary.daily_spending] == [
        ("2024-11-01", 10),
        ("2024-11-03", 50),
    ]


def test_monthly_summary_of_empty_month(seeded):
    summary = seeded.get_monthly_summary(2024, 2)

    assert summary.totals.transaction_count == 0
    assert summary.totals.total_amount == 0
    assert summary.category_breakdown == []
    assert summary.daily_spending == []


@pytest.mark.parametrize("year, month, field", [(1999, 1, "year"), (2024, 13, "month"), (None, 5, "year")])
def test_monthly_summary_rejects_out_of_range(service, year, month, field):
    with pytest.raises(ValidationError, match=field):
        service.get_monthly_summary(year, month)


def test_update_changes_only_supplied_fields(service):
    original = service.add_expense(12, "food", "Lunch", "2024-11-03")

    updated = service.update_expense(original.id, {"amount": 30})

    assert updated.amount == 30
    assert (updated.category, updated.description, updated.date, updated.created_at) == (
        original.category,
        original.description,
        original.date,
        original.created_at,
    )


def test_update_normalises_like_add(service):
    expense = service.add_expense(12, "food", "Lunch", "2024-11-03")
    updated = service.update_expense(expense.id, {"category": "HEALTH", "description": "  Pharmacy "})
    assert (updated.category, updated.description) == ("health", "Pharmacy")


def test_update_errors(service):
    expense = service.add_expense(12, "food", "Lunch", "2024-11-03")

    with pytest.raises(RecordNotFoundError, match="Expense with ID 999 not found"):
        service.update_expense(999, {"amount": 1})
    with pytest.raises(EmptyUpdateError, match="No fields to update"):
        service.update_expense(expense.id, {})
    with pytest.raises(ValidationError, match="amount"):
        service.update_expense(expense.id, {"amount": None})
    with pytest.raises(ValidationError, match="Unknown field"):
        service.update_expense(expense.id, {"created_at": "2024-01-01"})
    with pytest.raises(ValidationError, match="date"):
        service.update_expense(expense.id, {"amount": 5, "date": "2024-02-30"})

    assert service.get_expense(expense.id) == expense


def test_delete_returns_prior_state(service):
    expense = service.add_expense(12, "food", "Lunch", "2024-11-03")

    deleted = service.delete_expense(expense.id)

    assert deleted == expense
    with pytest.raises(RecordNotFoundError):
        service.get_expense(expense.id)


def test_delete_missing_id_changes_nothing(seeded):
    before = seeded.get_expenses()
    with pytest.raises(RecordNotFoundError, match="12345"):
        seeded.delete_expense(12345)
    assert seeded.get_expenses() == before


def test_export_uses_filters_and_escaping(service):
    service.add_expense(5, "food", 'He said "hi"', "2024-11-03")
    service.add_expense(6, "bills", "Water", "2024-11-04")

    export = service.export_to_csv(category="food")

    assert export.count == 1
    assert export.csv.splitlines()[1].split(",")[3] == '"He said ""hi"""'


def test_export_is_not_capped_by_list_limit(service):
    for _ in range(150):
        service.add_expense(1, "other", "x", "2024-11-03")
    assert service.export_to_csv().count == 150
    assert len(service.get_expenses()) == 100


def test_state_survives_reopen(db_path):
    first = open_service(db_path)
    expense = first.add_expense(9.99, "travel", "Bus", "2024-11-03")
    first.close()

    second = open_service(db_path)
    try:
        assert second.get_expense(expense.id) == expense
    finally:
        second.close()
