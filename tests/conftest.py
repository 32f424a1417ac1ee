from __future__ import annotations

from pathlib import Path

import pytest

from finance_core.services import ExpenseService, open_service
from finance_core.storage import SQLiteStorage
from finance_core.store import RecordStore


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "finance.db"


@pytest.fixture()
def storage(db_path: Path):
    storage = SQLiteStorage(db_path)
    storage.initialize()
    yield storage
    storage.close()


@pytest.fixture()
def store(storage: SQLiteStorage) -> RecordStore:
    return RecordStore(storage)


@pytest.fixture()
def service(db_path: Path):
    service = open_service(db_path)
    yield service
    service.close()


@pytest.fixture()
def seeded(service: ExpenseService) -> ExpenseService:
    service.add_expense(10, "food", "Groceries", "2024-11-01")
    service.add_expense(20, "Food", "Dinner out", "2024-11-03")
    service.add_expense(30, "transport", "Train pass", "2024-11-03")
    service.add_expense(45.5, "bills", "Electricity", "2024-10-15")
    return service
