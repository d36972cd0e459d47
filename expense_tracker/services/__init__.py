"""Services package."""

from expense_tracker.services.storage import (
    BlobTransactionStorage,
    CorruptDataError,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStoreInterface,
    StorageError,
    StorageUnavailableError,
    TransactionStorageInterface,
)

__all__ = [
    # Storage services
    "BlobTransactionStorage",
    "CorruptDataError",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStoreInterface",
    "StorageError",
    "StorageUnavailableError",
    "TransactionStorageInterface",
]
