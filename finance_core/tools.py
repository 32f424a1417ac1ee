"""Named tool operations and the uniform success/error response envelope."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from .exceptions import UnknownToolError, ValidationError
from .models import CATEGORIES
from .queries import DEFAULT_LIMIT, MAX_LIST_LIMIT
from .services import ExpenseService

logger = logging.getLogger(__name__)

DATE_SCHEMA_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def _date_property(description: str) -> Dict[str, Any]:
    return {"type": "string", "description": description, "pattern": DATE_SCHEMA_PATTERN}


def _category_property(description: str) -> Dict[str, Any]:
    return {"type": "string", "description": description, "enum": list(CATEGORIES)}


_RANGE_PROPERTIES = {
    "startDate": _date_property("Start date for filtering (YYYY-MM-DD format, inclusive)"),
    "endDate": _date_property("End date for filtering (YYYY-MM-DD format, inclusive)"),
}


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_schema: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


TOOLS = (
    ToolSpec(
        "add_expense",
        "Add a new expense entry to the database. Requires amount (positive number), "
        "category, description, and date (YYYY-MM-DD format).",
        {
            "type": "object",
            "properties": {
                "amount": {
                    "type": "number",
                    "description": "Expense amount (must be positive)",
                    "exclusiveMinimum": 0,
                },
                "category": _category_property(
                    f"Expense category. Valid options: {', '.join(CATEGORIES)}"
                ),
                "description": {"type": "string", "description": "Brief description of the expense"},
                "date": _date_property("Date of the expense in YYYY-MM-DD format"),
            },
            "required": ["amount", "category", "description", "date"],
        },
    ),
    ToolSpec(
        "get_expenses",
        "Retrieve expenses with optional filtering by date range and/or category. "
        f"Returns up to the specified limit (default {DEFAULT_LIMIT}).",
        {
            "type": "object",
            "properties": {
                **_RANGE_PROPERTIES,
                "category": _category_property("Filter by specific category"),
                "limit": {
                    "type": "number",
                    "description": f"Maximum number of expenses to return (default {DEFAULT_LIMIT})",
                    "default": DEFAULT_LIMIT,
                    "minimum": 1,
                    "maximum": MAX_LIST_LIMIT,
                },
            },
        },
    ),
    ToolSpec(
        "get_spending_by_category",
        "Get aggregated spending breakdown by category. Shows total amount, transaction "
        "count, average, min, max, and percentage for each category. Optionally filter "
        "by date range.",
        {"type": "object", "properties": dict(_RANGE_PROPERTIES)},
    ),
    ToolSpec(
        "get_monthly_summary",
        "Generate a comprehensive monthly spending summary including total spending, "
        "category breakdown, and daily spending trends for a specific month.",
        {
            "type": "object",
            "properties": {
                "year": {
                    "type": "number",
                    "description": "Year (e.g., 2024)",
                    "minimum": 2000,
                    "maximum": 2100,
                },
                "month": {
                    "type": "number",
                    "description": "Month number (1-12)",
                    "minimum": 1,
                    "maximum": 12,
                },
            },
            "required": ["year", "month"],
        },
    ),
    ToolSpec(
        "update_expense",
        "Update an existing expense. Provide the expense ID and any fields you want to "
        "update (amount, category, description, date). Only provided fields will be updated.",
        {
            "type": "object",
            "properties": {
                "id": {"type": "number", "description": "ID of the expense to update"},
                "amount": {
                    "type": "number",
                    "description": "New amount (optional)",
                    "exclusiveMinimum": 0,
                },
                "category": _category_property("New category (optional)"),
                "description": {"type": "string", "description": "New description (optional)"},
                "date": _date_property("New date in YYYY-MM-DD format (optional)"),
            },
            "required": ["id"],
        },
    ),
    ToolSpec(
        "delete_expense",
        "Delete an expense from the database by its ID. This action cannot be undone.",
        {
            "type": "object",
            "properties": {"id": {"type": "number", "description": "ID of the expense to delete"}},
            "required": ["id"],
        },
    ),
    ToolSpec(
        "export_to_csv",
        "Export expenses to CSV format. Optionally filter by date range and/or category. "
        "Returns CSV data as a string.",
        {
            "type": "object",
            "properties": {
                **_RANGE_PROPERTIES,
                "category": _category_property("Filter by specific category"),
            },
        },
    ),
)


def list_tools() -> List[Dict[str, Any]]:
    return [tool.to_dict() for tool in TOOLS]


# Handlers -----------------------------------------------------------------
def _add_expense(service: ExpenseService, args: Mapping[str, Any]) -> Dict[str, Any]:
    expense = service.add_expense(
        args.get("amount"), args.get("category"), args.get("description"), args.get("date")
    )
    return {"message": "Expense added successfully", "expense": expense.to_dict()}


def _get_expenses(service: ExpenseService, args: Mapping[str, Any]) -> Dict[str, Any]:
    limit = args.get("limit")
    expenses = service.get_expenses(
        args.get("startDate"),
        args.get("endDate"),
        args.get("category"),
        DEFAULT_LIMIT if limit is None else limit,
    )
    return {"count": len(expenses), "expenses": [expense.to_dict() for expense in expenses]}


def _get_spending_by_category(service: ExpenseService, args: Mapping[str, Any]) -> Dict[str, Any]:
    report = service.get_spending_by_category(args.get("startDate"), args.get("endDate"))
    return {
        "total_spending": report.total_spending,
        "categories": [stats.to_dict() for stats in report.categories],
    }


def _get_monthly_summary(service: ExpenseService, args: Mapping[str, Any]) -> Dict[str, Any]:
    summary = service.get_monthly_summary(args.get("year"), args.get("month"))
    return {
        "month": summary.month_name,
        "year": summary.year,
        "period": summary.period,
        "summary": summary.totals.to_dict(),
        "category_breakdown": [stats.to_dict() for stats in summary.category_breakdown],
        "daily_spending": [day.to_dict() for day in summary.daily_spending],
    }


def _update_expense(service: ExpenseService, args: Mapping[str, Any]) -> Dict[str, Any]:
    # Only keys actually present in the request count as supplied.
    changes = {key: value for key, value in args.items() if key != "id"}
    expense = service.update_expense(args.get("id"), changes)
    return {"message": "Expense updated successfully", "expense": expense.to_dict()}


def _delete_expense(service: ExpenseService, args: Mapping[str, Any]) -> Dict[str, Any]:
    deleted = service.delete_expense(args.get("id"))
    return {"message": "Expense deleted successfully", "deleted_expense": deleted.to_dict()}


def _export_to_csv(service: ExpenseService, args: Mapping[str, Any]) -> Dict[str, Any]:
    export = service.export_to_csv(args.get("startDate"), args.get("endDate"), args.get("category"))
    return {
        "count": export.count,
        "csv": export.csv,
        "message": f"Exported {export.count} expenses to CSV format",
    }


HANDLERS: Dict[str, Callable[[ExpenseService, Mapping[str, Any]], Dict[str, Any]]] = {
    "add_expense": _add_expense,
    "get_expenses": _get_expenses,
    "get_spending_by_category": _get_spending_by_category,
    "get_monthly_summary": _get_monthly_summary,
    "update_expense": _update_expense,
    "delete_expense": _delete_expense,
    "export_to_csv": _export_to_csv,
}


def dispatch(service: ExpenseService, name: str, arguments: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Run a tool and return its success payload; errors propagate."""
    try:
        handler = HANDLERS[name]
    except KeyError as exc:
        raise UnknownToolError(f"Unknown tool: {name}") from exc
    if arguments is None:
        arguments = {}
    elif not isinstance(arguments, Mapping):
        raise ValidationError("arguments must be an object")
    return {"success": True, **handler(service, arguments)}


def call_tool(service: ExpenseService, name: str, arguments: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Run a tool and convert any failure into ``{"success": False, "error": ...}``."""
    try:
        return dispatch(service, name, arguments)
    except (ValueError, LookupError, IOError) as exc:
        logger.warning("Tool %s failed: %s", name, exc)
        return {"success": False, "error": str(exc)}
    except Exception as exc:
        logger.exception("Unexpected error while running tool %s", name)
        return {"success": False, "error": str(exc) or exc.__class__.__name__}


def render_result(result: Mapping[str, Any]) -> str:
    return json.dumps(result, indent=2)
