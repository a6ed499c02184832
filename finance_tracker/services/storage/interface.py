"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a local JSON file (or a real database) later
2. Use in-memory storage for testing
3. Keep the aggregation logic decoupled from storage implementation

The interface is a generic tabular CRUD surface, not an ORM.
Rows are plain dicts of JSON-compatible values; every row has an "id"
and, for user data, a "user_id" owner column.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from finance_tracker.services.storage.changes import (
    ChangeAction,
    ChangeCallback,
    ChangeFeed,
    Subscription,
)


TRANSACTIONS = "transactions"
BANKS = "banks"
CATEGORIES = "categories"
SPENDING_GOALS = "goals"
SAVINGS_GOALS = "savings_goals"
GOAL_DEPOSITS = "goal_deposits"

TABLES = (
    TRANSACTIONS,
    BANKS,
    CATEGORIES,
    SPENDING_GOALS,
    SAVINGS_GOALS,
    GOAL_DEPOSITS,
)

Row = dict[str, Any]


class TableStoreInterface(ABC):
    """
    Abstract interface for table storage.

    Any storage implementation (JSON file, Google Sheets, PostgreSQL, etc.)
    must implement the CRUD methods. Change notification is shared:
    implementations call `_notify` after every successful mutation.
    """

    def __init__(self, changes: Optional[ChangeFeed] = None):
        self._changes = changes or ChangeFeed()

    @property
    def changes(self) -> ChangeFeed:
        return self._changes

    @abstractmethod
    async def select(
        self,
        table: str,
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Row]:
        """
        Return rows matching all equality filters.

        Args:
            table: Table name (one of TABLES)
            filters: Column -> value; every pair must match
            order_by: Optional column to sort by
            descending: Sort direction

        Returns:
            Copies of the matching rows
        """
        pass

    @abstractmethod
    async def insert(self, table: str, row: Row) -> Row:
        """
        Insert a row.

        Returns:
            The stored row

        Raises:
            DuplicateError: If a row with the same id exists
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def update(self, table: str, row_id: str, patch: Row) -> Row:
        """
        Apply a partial update to one row.

        Returns:
            The updated row

        Raises:
            NotFoundError: If the row doesn't exist
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, table: str, row_id: str) -> bool:
        """
        Delete a row by id.

        Returns:
            True if a row was deleted, False if it did not exist
        """
        pass

    @abstractmethod
    async def delete_where(self, table: str, filters: dict[str, Any]) -> int:
        """
        Delete every row matching the equality filters.

        Returns:
            Number of deleted rows
        """
        pass

    def subscribe(
        self,
        table: str,
        user_id: str,
        callback: ChangeCallback,
    ) -> Subscription:
        """
        Register for change notifications on one owner's rows of a table.

        The callback receives a payload-free ChangeEvent; subscribers are
        expected to refetch.
        """
        return self._changes.subscribe(table, user_id, callback)

    async def _notify(
        self,
        table: str,
        user_ids: set[Optional[str]],
        action: ChangeAction,
    ) -> None:
        for user_id in user_ids:
            if user_id is not None:
                await self._changes.publish(table, user_id, action)

    @staticmethod
    def _check_table(table: str) -> None:
        if table not in TABLES:
            raise StorageError(f"Unknown table: {table}")

    @staticmethod
    def _matches(row: Row, filters: Optional[dict[str, Any]]) -> bool:
        if not filters:
            return True
        return all(row.get(column) == value for column, value in filters.items())

    @staticmethod
    def _sorted(
        rows: list[Row],
        order_by: Optional[str],
        descending: bool,
    ) -> list[Row]:
        if not order_by:
            return rows
        return sorted(
            rows,
            key=lambda r: "" if r.get(order_by) is None else str(r.get(order_by)),
            reverse=descending,
        )


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
