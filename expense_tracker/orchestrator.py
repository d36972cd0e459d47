"""
Main Orchestrator for Expense Tracker

This module ties together all the components and defines the
end-to-end flows the presentation layer drives:
1. Add (form input -> validate -> prepend -> persist -> re-render)
2. Delete (id -> remove -> persist -> re-render)
3. View (filter -> list, totals and chart data)

DESIGN DECISION: The orchestrator enforces the boundaries:
- The session owns the one Ledger; there is no module-level instance
- Every mutation is followed by a full re-persist of the ledger
- A failed persist never rolls back the in-memory ledger, but it is
  always reported so the user knows the change may not survive a reload
"""

import datetime as dt
from typing import Optional

from expense_tracker.activity import ActivityLogger, configure_logging
from expense_tracker.config import Settings, get_settings
from expense_tracker.ledger import Ledger
from expense_tracker.models.session import (
    LedgerView,
    Notice,
    NoticeLevel,
    OperationResult,
)
from expense_tracker.models.transaction import (
    CategoryChartData,
    MonthlyChartData,
    Transaction,
    TransactionFilter,
)
from expense_tracker.services.storage import (
    BlobTransactionStorage,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStoreInterface,
    StorageError,
    TransactionStorageInterface,
)
from expense_tracker.validation import ValidationError


PERSIST_WARNING = "Your change may not survive a reload: {error}"


class LedgerSession:
    """
    Top-level session controller.

    Flow for every mutation:
    1. Apply it to the in-memory ledger
    2. Re-persist the entire ledger
    3. Return an OperationResult carrying the notice to show

    The caller re-renders from `view()` afterwards.
    """

    def __init__(
        self,
        ledger: Ledger,
        storage: TransactionStorageInterface,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._ledger = ledger
        self._storage = storage
        self._activity = activity_logger or ActivityLogger()
        self._filter = TransactionFilter()

    @classmethod
    def open(
        cls,
        storage: TransactionStorageInterface,
        activity_logger: Optional[ActivityLogger] = None,
    ) -> "LedgerSession":
        """
        Start a session from persisted state.

        Raises:
            StorageError: If stored data cannot be read. Corrupt data is
                          never replaced with an empty ledger.
        """
        activity_logger = activity_logger or ActivityLogger()
        try:
            transactions = storage.load()
            ledger = Ledger(transactions)
        except StorageError as e:
            activity_logger.ledger_load_failed(e)
            raise
        activity_logger.ledger_loaded(len(ledger))
        return cls(ledger, storage, activity_logger)

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def filter(self) -> TransactionFilter:
        return self._filter

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def _persist(self, operation: str) -> Optional[StorageError]:
        """Save the whole ledger. Returns the failure instead of raising."""
        try:
            self._storage.save(self._ledger.transactions)
        except StorageError as e:
            self._activity.persist_failed(operation, e)
            return e
        return None

    def add_transaction(
        self,
        description,
        amount,
        category,
        type,
        date,
    ) -> OperationResult:
        """
        Add a transaction from form input.

        Validation failures come back as an error notice with no state
        change. A storage failure keeps the new transaction in memory and
        comes back as a warning notice.
        """
        try:
            transaction = self._ledger.add(
                description=description,
                amount=amount,
                category=category,
                type=type,
                date=date,
            )
        except ValidationError as e:
            self._activity.transaction_rejected([issue.model_dump() for issue in e.issues])
            return OperationResult(
                changed=False,
                notice=Notice(
                    level=NoticeLevel.ERROR,
                    message=f"Could not add transaction: {e.message}",
                ),
            )

        self._activity.transaction_added(transaction)
        error = self._persist("add")
        if error is not None:
            return OperationResult(
                changed=True,
                persisted=False,
                transaction=transaction,
                notice=Notice(
                    level=NoticeLevel.WARNING,
                    message="Transaction added. " + PERSIST_WARNING.format(error=error),
                ),
            )
        return OperationResult(
            changed=True,
            persisted=True,
            transaction=transaction,
            notice=Notice(level=NoticeLevel.SUCCESS, message="Transaction added successfully!"),
        )

    def delete_transaction(self, transaction_id: int) -> OperationResult:
        """
        Delete a transaction by id.

        Deleting an id that is not present is not an error and
        does not touch storage.
        """
        removed = self._ledger.get(transaction_id)
        if not self._ledger.delete(transaction_id):
            self._activity.delete_missed(transaction_id)
            return OperationResult(
                changed=False,
                notice=Notice(level=NoticeLevel.INFO, message="Transaction already deleted"),
            )

        self._activity.transaction_deleted(transaction_id)
        error = self._persist("delete")
        if error is not None:
            return OperationResult(
                changed=True,
                persisted=False,
                transaction=removed,
                notice=Notice(
                    level=NoticeLevel.WARNING,
                    message="Transaction deleted. " + PERSIST_WARNING.format(error=error),
                ),
            )
        return OperationResult(
            changed=True,
            persisted=True,
            transaction=removed,
            notice=Notice(level=NoticeLevel.INFO, message="Transaction deleted"),
        )

    def retry_persist(self) -> OperationResult:
        """Try again to save the current ledger after a storage failure."""
        error = self._persist("retry")
        if error is not None:
            return OperationResult(
                changed=False,
                persisted=False,
                notice=Notice(level=NoticeLevel.WARNING, message=PERSIST_WARNING.format(error=error)),
            )
        return OperationResult(
            changed=False,
            persisted=True,
            notice=Notice(level=NoticeLevel.SUCCESS, message="Ledger saved"),
        )

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------

    def set_filter(self, category=None, type=None) -> TransactionFilter:
        """
        Change one or both filter fields. None leaves a field as it is.

        Raises:
            pydantic.ValidationError: On an unknown category or type
        """
        self._filter = TransactionFilter(
            category=self._filter.category if category is None else category,
            type=self._filter.type if type is None else type,
        )
        return self._filter

    def clear_filters(self) -> TransactionFilter:
        self._filter = TransactionFilter.cleared()
        return self._filter

    # -------------------------------------------------------------------------
    # Rendering contract
    # -------------------------------------------------------------------------

    def filtered_transactions(self) -> list[Transaction]:
        return self._ledger.filtered(self._filter)

    def view(self, reference_date: Optional[dt.date] = None) -> LedgerView:
        """
        Build everything the presentation layer renders.

        Only the transaction list honours the active filter.
        """
        category_totals = self._ledger.category_aggregate()
        monthly = self._ledger.monthly_aggregate(reference_date or dt.date.today())

        return LedgerView(
            filter=self._filter,
            transactions=self.filtered_transactions(),
            summary=self._ledger.summary(),
            category_totals=category_totals,
            monthly=monthly,
            category_chart=CategoryChartData(
                labels=[category.label for category in category_totals],
                data=list(category_totals.values()),
            ),
            monthly_chart=MonthlyChartData(
                labels=[bucket.label for bucket in monthly],
                income=[bucket.income for bucket in monthly],
                expenses=[bucket.expense for bucket in monthly],
            ),
        )

    @staticmethod
    def default_form_date() -> dt.date:
        """Date the add form resets to."""
        return dt.date.today()


def create_store(settings: Optional[Settings] = None) -> KeyValueStoreInterface:
    """Build the configured blob store."""
    storage_settings = (settings or get_settings()).storage
    if storage_settings.backend == "memory":
        return InMemoryKeyValueStore()
    return JsonFileKeyValueStore(storage_settings.resolved_path)


def create_app_components(
    settings: Optional[Settings] = None,
    store: Optional[KeyValueStoreInterface] = None,
) -> tuple[LedgerSession, TransactionStorageInterface]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use. Defaults to the cached environment settings.
        store: Blob store override, e.g. an InMemoryKeyValueStore in tests.

    Returns:
        (session, storage)

    Raises:
        StorageError: If the persisted ledger cannot be read
    """
    settings = settings or get_settings()
    app_settings = settings.app
    configure_logging(level=app_settings.effective_log_level, json_output=app_settings.log_json)

    key = settings.storage.key
    storage = BlobTransactionStorage(store or create_store(settings), key=key)
    session = LedgerSession.open(storage, ActivityLogger(storage_key=key))
    return session, storage


