"""Grouped statistics over expense records."""

from __future__ import annotations

import calendar
from collections import defaultdict
from typing import Dict, Iterable, List, Sequence, Tuple

from .models import CategoryStats, DailyStats, Expense, Totals


def summarize(records: Iterable[Expense]) -> Totals:
    amounts = [record.amount for record in records]
    total = sum(amounts, 0.0)
    average = total / len(amounts) if amounts else 0.0
    return Totals(transaction_count=len(amounts), total_amount=total, average_amount=average)


def _group(records: Iterable[Expense], key) -> Dict[str, List[float]]:
    groups: Dict[str, List[float]] = defaultdict(list)
    for record in records:
        groups[key(record)].append(record.amount)
    return groups


def percentage_of(part: float, total: float):
    """Share of ``total`` rounded to two places; the literal 0 when total is 0."""
    if total <= 0:
        return 0
    return round(part / total * 100, 2)


def breakdown_by_category(
    records: Sequence[Expense], *, with_percentage: bool = True
) -> Tuple[float, List[CategoryStats]]:
    """Return total spending and per-category stats, largest total first.

    Groups with equal totals are ordered by category name. Percentages are
    rounded per group and are not adjusted to sum to exactly 100.
    """
    groups = _group(records, lambda record: record.category)
    total_spending = sum((record.amount for record in records), 0.0)

    stats = []
    for category in sorted(groups):
        amounts = groups[category]
        group_total = sum(amounts, 0.0)
        stats.append(
            CategoryStats(
                category=category,
                transaction_count=len(amounts),
                total_amount=group_total,
                average_amount=group_total / len(amounts),
                min_amount=min(amounts),
                max_amount=max(amounts),
                percentage=percentage_of(group_total, total_spending) if with_percentage else None,
            )
        )
    # sort is stable, so name order survives among equal totals.
    stats.sort(key=lambda item: item.total_amount, reverse=True)
    return total_spending, stats


def breakdown_by_day(records: Iterable[Expense]) -> List[DailyStats]:
    groups = _group(records, lambda record: record.date)
    return [
        DailyStats(
            date=day,
            transaction_count=len(groups[day]),
            total_amount=sum(groups[day], 0.0),
        )
        for day in sorted(groups)
    ]


def month_bounds(year: int, month: int) -> Tuple[str, str]:
    """First and last calendar day of the month as YYYY-MM-DD strings."""
    last_day = calendar.monthrange(year, month)[1]
    return f"{year:04d}-{month:02d}-01", f"{year:04d}-{month:02d}-{last_day:02d}"
