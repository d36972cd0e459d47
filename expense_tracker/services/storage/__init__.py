"""
Storage Services Package

Provides abstract interfaces and concrete implementations for persisting
the ledger. Currently implements a JSON file blob store, but designed to be
swappable.
"""

from expense_tracker.services.storage.interface import (
    CorruptDataError,
    KeyValueStoreInterface,
    StorageError,
    StorageUnavailableError,
    TransactionStorageInterface,
)
from expense_tracker.services.storage.stores import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
)
from expense_tracker.services.storage.transaction_storage import (
    RECORD_FIELDS,
    BlobTransactionStorage,
)

__all__ = [
    # Interfaces
    "KeyValueStoreInterface",
    "TransactionStorageInterface",
    # Exceptions
    "CorruptDataError",
    "StorageError",
    "StorageUnavailableError",
    # Implementations
    "BlobTransactionStorage",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "RECORD_FIELDS",
]
