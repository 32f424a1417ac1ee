"""Console interface for the finance tracker."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from finance_core.config import configure_logging, get_settings
from finance_core.exceptions import (
    EmptyUpdateError,
    PersistenceError,
    RecordNotFoundError,
    UnknownToolError,
    ValidationError,
)
from finance_core.formatting import format_currency, parse_month
from finance_core.models import CATEGORIES, Expense
from finance_core.queries import DEFAULT_LIMIT
from finance_core.services import ExpenseService, open_service
from finance_core.tools import call_tool, list_tools, render_result
from finance_core.validators import date_is_valid


def _parse_date(value: str) -> str:
    if not date_is_valid(value):
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected a real calendar date in YYYY-MM-DD format."
        )
    return value


def _parse_amount(value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("Amount must be a numeric value") from exc


def _parse_month(value: str) -> str:
    if parse_month(value) is None:
        raise argparse.ArgumentTypeError(f"Invalid month '{value}'. Expected YYYY-MM.")
    return value


def _parse_arguments(value: str) -> Dict[str, Any]:
    try:
        arguments = json.loads(value)
    except json.JSONDecodeError as exc:
        raise argparse.ArgumentTypeError(f"Arguments must be a JSON object: {exc}") from exc
    if not isinstance(arguments, dict):
        raise argparse.ArgumentTypeError("Arguments must be a JSON object")
    return arguments


def _format_expense(expense: Expense) -> str:
    return (
        f"[{expense.id}] {expense.date} {format_currency(expense.amount)}\n"
        f"  Category: {expense.category}\n"
        f"  Description: {expense.description}\n"
    )


def _date_range(args: argparse.Namespace) -> Dict[str, Optional[str]]:
    month = getattr(args, "month", None)
    if month:
        start, end = parse_month(month)  # type: ignore[misc]
        return {"start_date": start, "end_date": end}
    return {"start_date": args.start, "end_date": args.end}


class _ToolFailed(Exception):
    """The tool envelope already reported the error on stdout."""


def handle_command(args: argparse.Namespace, service: ExpenseService) -> None:
    if args.command == "add":
        expense = service.add_expense(args.amount, args.category, args.description, args.date)
        print("Expense added:\n" + _format_expense(expense))
    elif args.command == "list":
        expenses = service.get_expenses(category=args.category, limit=args.limit, **_date_range(args))
        if not expenses:
            print("No expenses found.")
            return
        total = sum(expense.amount for expense in expenses)
        print(f"Found {len(expenses)} expenses (total {format_currency(total)}):")
        for expense in expenses:
            print(_format_expense(expense))
    elif args.command == "categories":
        report = service.get_spending_by_category(**_date_range(args))
        print(f"Total spending: {format_currency(report.total_spending)}")
        for stats in report.categories:
            print(
                f"  {stats.category:<14} {format_currency(stats.total_amount):>12} "
                f"{stats.percentage}% ({stats.transaction_count} transactions, "
                f"avg {format_currency(stats.average_amount)})"
            )
    elif args.command == "monthly":
        summary = service.get_monthly_summary(args.year, args.month)
        totals = summary.totals
        print(f"{summary.month_name} {summary.year} ({summary.period})")
        print(
            f"  {totals.transaction_count} transactions, total {format_currency(totals.total_amount)}, "
            f"average {format_currency(totals.average_amount)}"
        )
        for stats in summary.category_breakdown:
            print(f"  {stats.category:<14} {format_currency(stats.total_amount):>12}")
        for day in summary.daily_spending:
            print(f"  {day.date} {format_currency(day.total_amount):>12} ({day.transaction_count})")
    elif args.command == "update":
        changes = {
            "amount": args.amount,
            "category": args.category,
            "description": args.description,
            "date": args.date,
        }
        cleaned = {k: v for k, v in changes.items() if v is not None}
        expense = service.update_expense(args.id, cleaned)
        print("Expense updated:\n" + _format_expense(expense))
    elif args.command == "delete":
        deleted = service.delete_expense(args.id)
        print(f"Expense {deleted.id} deleted:\n" + _format_expense(deleted))
    elif args.command == "export":
        export = service.export_to_csv(category=args.category, **_date_range(args))
        if args.output:
            args.output.write_text(export.csv, encoding="utf-8")
            print(f"Exported {export.count} expenses to {args.output}")
        else:
            print(export.csv)
    elif args.command == "call":
        result = call_tool(service, args.tool, args.arguments)
        print(render_result(result))
        if not result["success"]:
            raise _ToolFailed()


def _add_range_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--start", type=_parse_date, help="Inclusive start date (YYYY-MM-DD)")
    parser.add_argument("--end", type=_parse_date, help="Inclusive end date (YYYY-MM-DD)")
    parser.add_argument("--month", type=_parse_month, help="Shorthand for a whole month (YYYY-MM)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Personal Finance Tracker CLI")
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="SQLite database file (default: $FINANCE_TRACKER_DB_PATH or ./data/finance.db)",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    add = subparsers.add_parser("add", help="Add a new expense")
    add.add_argument("amount", type=_parse_amount)
    add.add_argument("category", help=f"One of: {', '.join(CATEGORIES)}")
    add.add_argument("description")
    add.add_argument("date", type=_parse_date)

    list_parser = subparsers.add_parser("list", help="List expenses, most recent first")
    _add_range_arguments(list_parser)
    list_parser.add_argument("--category")
    list_parser.add_argument("--limit", type=int, default=DEFAULT_LIMIT)

    categories = subparsers.add_parser("categories", help="Spending breakdown by category")
    _add_range_arguments(categories)

    monthly = subparsers.add_parser("monthly", help="Monthly spending summary")
    monthly.add_argument("year", type=int)
    monthly.add_argument("month", type=int)

    update = subparsers.add_parser("update", help="Edit an existing expense")
    update.add_argument("id", type=int)
    update.add_argument("--amount", type=_parse_amount)
    update.add_argument("--category")
    update.add_argument("--description")
    update.add_argument("--date", type=_parse_date)

    delete = subparsers.add_parser("delete", help="Delete an expense")
    delete.add_argument("id", type=int)

    export = subparsers.add_parser("export", help="Export expenses as CSV")
    _add_range_arguments(export)
    export.add_argument("--category")
    export.add_argument("--output", type=Path, help="Write CSV to this file instead of stdout")

    subparsers.add_parser("tools", help="Print the tool catalogue as JSON")

    call = subparsers.add_parser("call", help="Invoke a tool by name with JSON arguments")
    call.add_argument("tool")
    call.add_argument("arguments", nargs="?", type=_parse_arguments, default={})

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings(args.db)
    configure_logging((args.log_level or settings.log_level).upper())

    if args.command == "tools":
        print(json.dumps(list_tools(), indent=2))
        return 0

    if args.command == "serve":
        from api.app import create_app

        try:
            app = create_app(settings=settings)
        except PersistenceError as exc:
            print(f"Storage error: {exc}", file=sys.stderr)
            return 2
        app.run(host=args.host or settings.host, port=args.port or settings.port)
        return 0

    try:
        service = open_service(settings.db_path)
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 2

    try:
        handle_command(args, service)
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except EmptyUpdateError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except (RecordNotFoundError, UnknownToolError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    except _ToolFailed:
        return 1
    finally:
        service.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
