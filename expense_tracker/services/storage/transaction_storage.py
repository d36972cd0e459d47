"""
Blob-backed Transaction Storage

Serializes the full ledger to a JSON array and keeps it under a single
key of a KeyValueStoreInterface.

Record format (one per transaction, newest first):
    {"id": 1705312800000, "description": "Coffee", "amount": 4.5,
     "category": "food", "type": "expense", "date": "2024-01-15",
     "createdAt": "2024-01-15T10:00:00+00:00"}

DESIGN DECISION: Corrupt data fails loudly with CorruptDataError.
Only a missing blob means "empty ledger". We never reset the user's data
because we could not read it.
"""

import json
from decimal import Decimal
from typing import Any, Iterable, Optional

from pydantic import ValidationError as ModelValidationError

from expense_tracker.models.transaction import Transaction
from expense_tracker.services.storage.interface import (
    CorruptDataError,
    KeyValueStoreInterface,
    StorageError,
    TransactionStorageInterface,
)
from expense_tracker.services.storage.stores import InMemoryKeyValueStore


DEFAULT_KEY = "transactions"

RECORD_FIELDS = [
    "id",
    "description",
    "amount",
    "category",
    "type",
    "date",
    "createdAt",
]


def _amount_to_number(amount: Decimal) -> int | float:
    """
    JSON number for an amount; integral amounts stay integers.

    The float is exact for amounts that passed the validator (at most two
    decimal places and below MAX_AMOUNT, so never more than 15 significant
    digits).
    """
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


class BlobTransactionStorage(TransactionStorageInterface):
    """
    Transaction storage on top of a key-value blob store.

    Every save rewrites the whole blob.
    """

    def __init__(
        self,
        store: Optional[KeyValueStoreInterface] = None,
        key: str = DEFAULT_KEY,
    ):
        self._store = store or InMemoryKeyValueStore()
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def _transaction_to_record(self, transaction: Transaction) -> dict[str, Any]:
        """Convert a Transaction to a storage record."""
        return {
            "id": transaction.id,
            "description": transaction.description,
            "amount": _amount_to_number(transaction.amount),
            "category": transaction.category.value,
            "type": transaction.type.value,
            "date": transaction.date.isoformat(),
            "createdAt": transaction.created_at.isoformat(),
        }

    def _record_to_transaction(self, record: Any, position: int) -> Transaction:
        """Convert a storage record to a Transaction."""
        if not isinstance(record, dict):
            raise CorruptDataError(f"Record {position} is not an object")
        try:
            return Transaction.model_validate(record)
        except ModelValidationError as e:
            raise CorruptDataError(f"Record {position} is not a valid transaction: {e}")

    def serialize(self, transactions: Iterable[Transaction]) -> str:
        return json.dumps(
            [self._transaction_to_record(t) for t in transactions],
            ensure_ascii=False,
        )

    def deserialize(self, blob: str) -> list[Transaction]:
        try:
            # Decimal keeps amounts at the precision they were written with
            records = json.loads(blob, parse_float=Decimal)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"Stored ledger is not valid JSON: {e}")

        if not isinstance(records, list):
            raise CorruptDataError("Stored ledger is not a list of transactions")

        transactions = [
            self._record_to_transaction(record, position)
            for position, record in enumerate(records)
        ]

        seen: set[int] = set()
        for transaction in transactions:
            if transaction.id in seen:
                raise CorruptDataError(f"Duplicate transaction id in stored ledger: {transaction.id}")
            seen.add(transaction.id)

        return transactions

    def load(self) -> list[Transaction]:
        try:
            blob = self._store.get(self._key)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to load ledger: {e}")
        if blob is None or not blob.strip():
            return []
        return self.deserialize(blob)

    def save(self, transactions: Iterable[Transaction]) -> None:
        blob = self.serialize(transactions)
        try:
            self._store.set(self._key, blob)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save ledger: {e}")
