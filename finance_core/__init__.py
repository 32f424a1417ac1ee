"""Core business logic package for the finance tracker."""

from .exceptions import (
    EmptyUpdateError,
    PersistenceError,
    RecordNotFoundError,
    UnknownToolError,
    ValidationError,
)
from .models import CATEGORIES, Expense
from .services import ExpenseService, open_service
from .storage import SQLiteStorage
from .store import RecordStore
from .tools import call_tool, list_tools

__all__ = [
    "CATEGORIES",
    "Expense",
    "ExpenseService",
    "RecordStore",
    "SQLiteStorage",
    "call_tool",
    "list_tools",
    "open_service",
    "EmptyUpdateError",
    "PersistenceError",
    "RecordNotFoundError",
    "UnknownToolError",
    "ValidationError",
]
