"""Flask REST API exposing the finance tracker operations."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from finance_core.config import Settings, get_settings
from finance_core.exceptions import (
    EmptyUpdateError,
    PersistenceError,
    RecordNotFoundError,
    UnknownToolError,
    ValidationError,
)
from finance_core.formatting import parse_month
from finance_core.queries import DEFAULT_LIMIT
from finance_core.services import open_service
from finance_core.tools import dispatch, list_tools


def create_app(db_path: Optional[Path] = None, settings: Optional[Settings] = None) -> Flask:
    app = Flask(__name__)
    settings = settings or get_settings(db_path)
    if db_path is not None:
        settings.db_path = Path(db_path)

    if settings.is_dev:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    elif settings.allowed_origins:
        CORS(app, resources={r"/*": {"origins": settings.allowed_origins}}, supports_credentials=True)
    else:
        CORS(app)

    # A storage failure here aborts startup.
    service = open_service(settings.db_path)
    app.extensions["finance_service"] = service

    def _success(payload: Any, status: int = 200):
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"success": False, "error": str(exc), "details": message}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(EmptyUpdateError)
    def handle_empty_update(exc: EmptyUpdateError):
        return _handle_error(exc, 400, "Nothing to update")

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(UnknownToolError)
    def handle_unknown_tool(exc: UnknownToolError):
        return _handle_error(exc, 404, "Unknown tool")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception):
        # Routing errors (404, 405) keep their own responses.
        if isinstance(exc, HTTPException):
            return exc
        app.logger.exception("Unexpected error")
        return (
            jsonify({
                "success": False,
                "error": str(exc) or exc.__class__.__name__,
                "details": "Unexpected error",
            }),
            500,
        )

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    def _optional_json_body() -> Dict[str, Any]:
        if not request.get_data():
            return {}
        return _json_body()

    def _arg(name: str) -> Optional[str]:
        value = request.args.get(name)
        return value if value not in (None, "") else None

    def _int_arg(name: str, default: Optional[int] = None) -> Optional[int]:
        value = _arg(name)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise ValidationError(f"{name} must be an integer") from exc

    def _range_args() -> Dict[str, Optional[str]]:
        start, end = _arg("startDate"), _arg("endDate")
        month = _arg("month")
        if month is not None:
            bounds = parse_month(month)
            if bounds is None:
                raise ValidationError("month must be in YYYY-MM format")
            start, end = bounds
        return {"start_date": start, "end_date": end}

    @app.get("/tools")
    def get_tools():
        return _success({"tools": list_tools()})

    @app.post("/tools/<name>")
    def run_tool(name: str):
        return _success(dispatch(service, name, _optional_json_body()))

    @app.get("/expenses")
    def list_expenses():
        expenses = service.get_expenses(
            category=_arg("category"), limit=_int_arg("limit", DEFAULT_LIMIT), **_range_args()
        )
        return _success({
            "success": True,
            "count": len(expenses),
            "expenses": [expense.to_dict() for expense in expenses],
        })

    @app.post("/expenses")
    def create_expense():
        payload = _json_body()
        expense = service.add_expense(
            payload.get("amount"),
            payload.get("category"),
            payload.get("description"),
            payload.get("date"),
        )
        return _success({"success": True, "expense": expense.to_dict()}, 201)

    @app.get("/expenses/<int:expense_id>")
    def get_expense(expense_id: int):
        expense = service.get_expense(expense_id)
        return _success({"success": True, "expense": expense.to_dict()})

    @app.put("/expenses/<int:expense_id>")
    def update_expense(expense_id: int):
        payload = _json_body()
        changes = {key: value for key, value in payload.items() if key != "id"}
        expense = service.update_expense(expense_id, changes)
        return _success({"success": True, "expense": expense.to_dict()})

    @app.delete("/expenses/<int:expense_id>")
    def delete_expense(expense_id: int):
        deleted = service.delete_expense(expense_id)
        return _success({"success": True, "deleted_expense": deleted.to_dict()})

    @app.get("/summary/categories")
    def category_summary():
        report = service.get_spending_by_category(**_range_args())
        return _success({
            "success": True,
            "total_spending": report.total_spending,
            "categories": [stats.to_dict() for stats in report.categories],
        })

    @app.get("/summary/<int:year>/<int:month>")
    def monthly_summary(year: int, month: int):
        return _success(dispatch(service, "get_monthly_summary", {"year": year, "month": month}))

    @app.get("/export.csv")
    def export_csv():
        export = service.export_to_csv(category=_arg("category"), **_range_args())
        return Response(
            export.csv,
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=expenses.csv"},
        )

    return app
