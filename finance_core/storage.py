"""Persistence utilities for the finance tracker core services."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .exceptions import PersistenceError

logger = logging.getLogger(__name__)

COLUMNS = ("id", "amount", "category", "description", "date", "created_at")
MUTABLE_COLUMNS = frozenset({"amount", "category", "description", "date"})

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS expenses (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        amount REAL NOT NULL CHECK(amount > 0),
        category TEXT NOT NULL,
        description TEXT NOT NULL,
        date TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_expenses_date ON expenses(date)",
    "CREATE INDEX IF NOT EXISTS idx_expenses_category ON expenses(category)",
)


class SQLiteStorage:
    """Single-file SQLite backing store; every write is committed before returning."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._conn: Optional[sqlite3.Connection] = None

    def initialize(self) -> None:
        existed = self._path.exists()
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            # The record store serialises access, so one connection may be shared across threads.
            self._conn = sqlite3.connect(str(self._path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            with self._conn:
                for statement in SCHEMA:
                    self._conn.execute(statement)
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(f"Unable to initialise database at {self._path}") from exc

        if existed:
            logger.info("Loaded existing database from %s", self._path)
        else:
            logger.info("Created new database at %s", self._path)

    def load(self) -> List[Dict[str, Any]]:
        try:
            rows = self._connection.execute(
                f"SELECT {', '.join(COLUMNS)} FROM expenses ORDER BY id"
            ).fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Unable to read from {self._path}") from exc
        return [dict(row) for row in rows]

    def insert(self, row: Mapping[str, Any]) -> int:
        try:
            with self._connection:
                cursor = self._connection.execute(
                    "INSERT INTO expenses (amount, category, description, date, created_at) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (
                        row["amount"],
                        row["category"],
                        row["description"],
                        row["date"],
                        row["created_at"],
                    ),
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Unable to write to {self._path}") from exc
        return int(cursor.lastrowid)

    def update(self, record_id: int, changes: Mapping[str, Any]) -> None:
        columns = [column for column in changes if column in MUTABLE_COLUMNS]
        if len(columns) != len(changes):
            raise PersistenceError(f"Refusing to update non-mutable columns: {sorted(changes)}")
        if not columns:
            return
        # Column names come from the whitelist above; values are always bound.
        assignments = ", ".join(f"{column} = ?" for column in columns)
        params = [changes[column] for column in columns] + [record_id]
        try:
            with self._connection:
                self._connection.execute(
                    f"UPDATE expenses SET {assignments} WHERE id = ?", params
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Unable to write to {self._path}") from exc

    def delete(self, record_id: int) -> None:
        try:
            with self._connection:
                self._connection.execute("DELETE FROM expenses WHERE id = ?", (record_id,))
        except sqlite3.Error as exc:
            raise PersistenceError(f"Unable to write to {self._path}") from exc

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "SQLiteStorage":
        if self._conn is None:
            self.initialize()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise PersistenceError("Storage has not been initialised")
        return self._conn

    @property
    def path(self) -> Path:
        return self._path
