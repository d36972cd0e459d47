"""
Abstract Storage Interface

DESIGN DECISION: We define abstract interfaces for storage operations.
This allows us to:
1. Swap the JSON file for another blob store later
2. Use in-memory storage for testing
3. Keep the ledger decoupled from storage implementation

Two layers:
- KeyValueStoreInterface: the external blob store (get/set of strings)
- TransactionStorageInterface: load/save of the whole ledger sequence

The ledger is always persisted wholesale. There is no append or
incremental update operation on purpose.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from expense_tracker.models.transaction import Transaction


class KeyValueStoreInterface(ABC):
    """
    Abstract interface for a string blob store.

    Any store (JSON file, in-memory dict, ...) must implement these methods.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the blob stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored blob, or None if nothing is stored under the key

        Raises:
            StorageUnavailableError: If the store cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Overwrite the blob stored under a key.

        Args:
            key: Storage key
            value: Serialized blob

        Raises:
            StorageError: If the write fails
        """
        pass


class TransactionStorageInterface(ABC):
    """
    Abstract interface for persisting the ledger.

    Implementations serialize the full sequence on every save.
    """

    @abstractmethod
    def load(self) -> list[Transaction]:
        """
        Load the persisted ledger.

        Returns:
            Transactions in stored order (newest first).
            Empty if nothing has been stored yet.

        Raises:
            CorruptDataError: If stored data exists but cannot be read back
            StorageError: If the store itself fails
        """
        pass

    @abstractmethod
    def save(self, transactions: Iterable[Transaction]) -> None:
        """
        Persist the entire ledger, replacing what was stored.

        Args:
            transactions: Full sequence, newest first

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDataError(StorageError):
    """Stored data exists but is not a valid ledger."""
    pass


class StorageUnavailableError(StorageError):
    """The storage backend could not be read or written."""
    pass
