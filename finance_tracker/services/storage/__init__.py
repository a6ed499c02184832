"""
Storage Services Package

Provides the abstract table store and its implementations.
The local JSON store is the default backend; Google Sheets is the hosted
option. All of them publish change notifications through a ChangeFeed.
"""

from finance_tracker.services.storage.changes import (
    ChangeAction,
    ChangeEvent,
    ChangeFeed,
    Subscription,
)
from finance_tracker.services.storage.interface import (
    BANKS,
    CATEGORIES,
    GOAL_DEPOSITS,
    SAVINGS_GOALS,
    SPENDING_GOALS,
    TABLES,
    TRANSACTIONS,
    ConnectionError,
    DuplicateError,
    NotFoundError,
    StorageError,
    TableStoreInterface,
)
from finance_tracker.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsTableStore,
)
from finance_tracker.services.storage.local import (
    InMemoryTableStore,
    JsonFileKeyValueStorage,
    KeyValueStorage,
    MemoryKeyValueStorage,
)

__all__ = [
    # Interface
    "TableStoreInterface",
    "KeyValueStorage",
    # Tables
    "BANKS",
    "CATEGORIES",
    "GOAL_DEPOSITS",
    "SAVINGS_GOALS",
    "SPENDING_GOALS",
    "TABLES",
    "TRANSACTIONS",
    # Change feed
    "ChangeAction",
    "ChangeEvent",
    "ChangeFeed",
    "Subscription",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Local implementation
    "InMemoryTableStore",
    "JsonFileKeyValueStorage",
    "MemoryKeyValueStorage",
    # Google Sheets implementation
    "GoogleSheetsClient",
    "GoogleSheetsTableStore",
]
