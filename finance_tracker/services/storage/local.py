"""
Local Table Store

Keeps every table in memory and mirrors the whole state into a
key-value port after each mutation ("load at init, write on every
mutation").

Two key-value ports are provided:
- MemoryKeyValueStorage: a dict, used by tests and the "memory" backend
- JsonFileKeyValueStorage: a JSON file on disk, used by the "local" backend

The currency preference uses the same port, so one file holds all
client-side state.
"""

import copy
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional
from uuid import uuid4

from finance_tracker.services.storage.changes import ChangeAction, ChangeFeed
from finance_tracker.services.storage.interface import (
    TABLES,
    DuplicateError,
    NotFoundError,
    Row,
    StorageError,
    TableStoreInterface,
)


TABLES_STORAGE_KEY = "finance-tracker-tables"


class KeyValueStorage(ABC):
    """Minimal get/set port for persisted client-side state."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass


class MemoryKeyValueStorage(KeyValueStorage):
    """Process-local key-value storage."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileKeyValueStorage(KeyValueStorage):
    """
    Key-value storage in a single JSON object file.

    Writes go to a temporary file that replaces the original, so a crash
    mid-write never leaves a truncated file behind.
    """

    def __init__(self, path: Path | str):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupted local store {self._path}: {e}")
        except OSError as e:
            raise StorageError(f"Failed to read local store {self._path}: {e}")
        if not isinstance(data, dict):
            raise StorageError(f"Local store {self._path} is not a JSON object")
        return data

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except OSError as e:
            raise StorageError(f"Failed to write local store {self._path}: {e}")


class InMemoryTableStore(TableStoreInterface):
    """
    Table store held in memory, optionally persisted through a key-value port.

    Mutations are computed on a copy, persisted, and only then swapped in,
    so a failed write leaves the in-memory state unchanged.
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        changes: Optional[ChangeFeed] = None,
        storage_key: str = TABLES_STORAGE_KEY,
    ):
        super().__init__(changes)
        self._storage = storage
        self._storage_key = storage_key
        self._tables: dict[str, list[Row]] = self._load()

    def _load(self) -> dict[str, list[Row]]:
        tables: dict[str, list[Row]] = {table: [] for table in TABLES}
        if self._storage is None:
            return tables

        raw = self._storage.get(self._storage_key)
        if not raw:
            return tables
        try:
            stored = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Stored tables are not valid JSON: {e}")

        for table in TABLES:
            rows = stored.get(table) or []
            tables[table] = [row for row in rows if isinstance(row, dict) and row.get("id")]
        return tables

    def _commit(self, table: str, rows: list[Row]) -> None:
        if self._storage is not None:
            snapshot = dict(self._tables)
            snapshot[table] = rows
            try:
                self._storage.set(self._storage_key, json.dumps(snapshot, default=str))
            except StorageError:
                raise
            except (OSError, TypeError, ValueError) as e:
                raise StorageError(f"Failed to persist table {table}: {e}")
        self._tables[table] = rows

    async def select(
        self,
        table: str,
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Row]:
        self._check_table(table)
        rows = [
            copy.deepcopy(row)
            for row in self._tables[table]
            if self._matches(row, filters)
        ]
        return self._sorted(rows, order_by, descending)

    async def insert(self, table: str, row: Row) -> Row:
        self._check_table(table)
        new_row = copy.deepcopy(row)
        new_row.setdefault("id", str(uuid4()))

        if any(existing["id"] == new_row["id"] for existing in self._tables[table]):
            raise DuplicateError(f"{table} row already exists: {new_row['id']}")

        self._commit(table, self._tables[table] + [new_row])
        await self._notify(table, {new_row.get("user_id")}, ChangeAction.INSERT)
        return copy.deepcopy(new_row)

    async def update(self, table: str, row_id: str, patch: Row) -> Row:
        self._check_table(table)
        rows = list(self._tables[table])
        for idx, existing in enumerate(rows):
            if existing["id"] == row_id:
                updated = {**existing, **copy.deepcopy(patch), "id": row_id}
                rows[idx] = updated
                self._commit(table, rows)
                await self._notify(
                    table,
                    {existing.get("user_id"), updated.get("user_id")},
                    ChangeAction.UPDATE,
                )
                return copy.deepcopy(updated)

        raise NotFoundError(f"{table} row not found: {row_id}")

    async def delete(self, table: str, row_id: str) -> bool:
        self._check_table(table)
        rows = self._tables[table]
        for existing in rows:
            if existing["id"] == row_id:
                self._commit(table, [r for r in rows if r["id"] != row_id])
                await self._notify(table, {existing.get("user_id")}, ChangeAction.DELETE)
                return True
        return False

    async def delete_where(self, table: str, filters: dict[str, Any]) -> int:
        self._check_table(table)
        if not filters:
            raise StorageError("delete_where requires at least one filter")

        rows = self._tables[table]
        doomed = [r for r in rows if self._matches(r, filters)]
        if not doomed:
            return 0

        self._commit(table, [r for r in rows if not self._matches(r, filters)])
        await self._notify(
            table,
            {r.get("user_id") for r in doomed},
            ChangeAction.DELETE,
        )
        return len(doomed)
