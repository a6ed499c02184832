"""Services package."""

from finance_tracker.services.auth import AuthProvider, SessionAuthProvider
from finance_tracker.services.storage import (
    ConnectionError,
    DuplicateError,
    GoogleSheetsTableStore,
    InMemoryTableStore,
    JsonFileKeyValueStorage,
    KeyValueStorage,
    MemoryKeyValueStorage,
    NotFoundError,
    StorageError,
    TableStoreInterface,
)

__all__ = [
    # Auth
    "AuthProvider",
    "SessionAuthProvider",
    # Storage services
    "ConnectionError",
    "DuplicateError",
    "GoogleSheetsTableStore",
    "InMemoryTableStore",
    "JsonFileKeyValueStorage",
    "KeyValueStorage",
    "MemoryKeyValueStorage",
    "NotFoundError",
    "StorageError",
    "TableStoreInterface",
]
