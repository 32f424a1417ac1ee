"""In-memory expense table mirrored onto the durable backing store."""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Any, Callable, Dict, List, Mapping, Optional

from .exceptions import RecordNotFoundError
from .models import Expense, utc_now
from .storage import SQLiteStorage


class RecordStore:
    """Owns the expense table; writes reach storage before memory changes."""

    def __init__(self, storage: SQLiteStorage) -> None:
        self._storage = storage
        self._records: Dict[int, Expense] = {}
        self._lock = threading.RLock()
        self.load()  # Hydrate in-memory cache from persistence on construction.

    @property
    def lock(self) -> threading.RLock:
        """Held by callers that need several primitives to run as one unit."""
        return self._lock

    def load(self) -> None:
        with self._lock:
            self._records = {
                expense.id: expense
                for expense in (Expense.from_row(row) for row in self._storage.load())
            }

    def insert(self, fields: Mapping[str, Any]) -> int:
        with self._lock:
            row = {**fields, "created_at": utc_now()}
            record_id = self._storage.insert(row)
            self._records[record_id] = Expense.from_row({**row, "id": record_id})
            return record_id

    def select_one(self, record_id: int) -> Optional[Expense]:
        with self._lock:
            return self._records.get(record_id)

    def select_many(
        self,
        predicate: Optional[Callable[[Expense], bool]] = None,
        *,
        key: Optional[Callable[[Expense], Any]] = None,
        reverse: bool = False,
        limit: Optional[int] = None,
    ) -> List[Expense]:
        with self._lock:
            records = list(self._records.values())
        if predicate is not None:
            records = [record for record in records if predicate(record)]
        if key is not None:
            records.sort(key=key, reverse=reverse)
        if limit is not None:
            records = records[:limit]
        return records

    def update(self, record_id: int, changes: Mapping[str, Any]) -> None:
        with self._lock:
            existing = self._get_or_raise(record_id)
            self._storage.update(record_id, changes)
            # Swap the whole record so readers never observe a partial write.
            self._records[record_id] = replace(existing, **changes)

    def delete(self, record_id: int) -> None:
        with self._lock:
            self._get_or_raise(record_id)
            self._storage.delete(record_id)
            del self._records[record_id]

    def close(self) -> None:
        with self._lock:
            self._storage.close()

    def __len__(self) -> int:
        return len(self._records)

    def _get_or_raise(self, record_id: int) -> Expense:
        try:
            return self._records[record_id]
        except KeyError as exc:
            raise RecordNotFoundError(f"Expense with ID {record_id} not found") from exc
