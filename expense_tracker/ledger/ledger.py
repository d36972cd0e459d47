"""
The Ledger

DESIGN DECISION: The ledger is a plain in-memory object.
It owns the ordered transaction sequence (newest first), applies the two
mutations (add, delete) and computes every derived view on demand.

It knows nothing about storage or rendering. The session controller loads
it, persists it after each mutation and hands its views to the UI.

GUARANTEES:
- amount > 0 for every stored transaction; direction comes from `type`
- ids are unique within the ledger
- summary and aggregates always cover the full ledger, never a filtered view
"""

import datetime as dt
import time
from calendar import monthrange
from decimal import Decimal
from typing import Callable, Iterable, Iterator, Optional

from expense_tracker.models.transaction import (
    LedgerSummary,
    MonthlyBucket,
    Transaction,
    TransactionCategory,
    TransactionFilter,
    TransactionType,
)
from expense_tracker.validation import TransactionValidator


TREND_MONTHS = 6

ZERO = Decimal("0")


def _millis() -> int:
    return time.time_ns() // 1_000_000


class TransactionIdGenerator:
    """
    Issues collision-free integer ids.

    Ids track the millisecond clock, but each id is strictly greater than
    the previous one, so rapid successive adds within the same millisecond
    (or a clock that steps backwards) still get distinct, increasing ids.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None, floor: int = 0):
        self._clock = clock or _millis
        self._last = floor

    def seed(self, existing: Iterable[int]) -> None:
        """Never issue an id at or below any id already in use."""
        for value in existing:
            if value > self._last:
                self._last = value

    def __call__(self) -> int:
        candidate = max(self._clock(), self._last + 1)
        self._last = candidate
        return candidate


def month_window(reference_date: dt.date, months: int = TREND_MONTHS) -> list[tuple[int, int]]:
    """(year, month) pairs ending at the reference month, oldest first."""
    anchor = reference_date.year * 12 + (reference_date.month - 1)
    window = []
    for offset in range(months - 1, -1, -1):
        year, month_index = divmod(anchor - offset, 12)
        window.append((year, month_index + 1))
    return window


def _sum_amounts(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), ZERO)


class Ledger:
    """
    Ordered collection of transactions plus derived computations.

    Insertion order is most-recent-first: `add` prepends.
    """

    def __init__(
        self,
        transactions: Iterable[Transaction] = (),
        id_generator: Optional[TransactionIdGenerator] = None,
        validator: Optional[TransactionValidator] = None,
    ):
        """
        Initialize the ledger.

        Args:
            transactions: Existing transactions, newest first (as loaded)
            id_generator: Source of new ids. Seeded above every existing id.
            validator: Validator for add requests

        Raises:
            ValueError: If two transactions share an id
        """
        self._transactions: list[Transaction] = list(transactions)

        seen: set[int] = set()
        for transaction in self._transactions:
            if transaction.id in seen:
                raise ValueError(f"Duplicate transaction id: {transaction.id}")
            seen.add(transaction.id)

        self._next_id = id_generator or TransactionIdGenerator()
        self._next_id.seed(seen)
        self._validator = validator or TransactionValidator()

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """Read-only snapshot, newest first."""
        return tuple(self._transactions)

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(tuple(self._transactions))

    def get(self, transaction_id: int) -> Optional[Transaction]:
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(
        self,
        description,
        amount,
        category,
        type,
        date,
    ) -> Transaction:
        """
        Record a new transaction and prepend it.

        Raises:
            ValidationError: If any field is missing or invalid.
                             The ledger is left unchanged.
        """
        clean = self._validator.validate(
            description=description,
            amount=amount,
            category=category,
            type=type,
            date=date,
        )

        transaction = Transaction(
            id=self._next_id(),
            description=clean.description,
            amount=clean.amount,
            category=clean.category,
            type=clean.type,
            date=clean.date,
        )
        self._transactions.insert(0, transaction)
        return transaction

    def delete(self, transaction_id: int) -> bool:
        """
        Remove the transaction with this id.

        Returns:
            True if something was removed. A missing id is a no-op.
        """
        for index, transaction in enumerate(self._transactions):
            if transaction.id == transaction_id:
                del self._transactions[index]
                return True
        return False

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    def filtered(self, transaction_filter: Optional[TransactionFilter] = None) -> list[Transaction]:
        """Subsequence matching the filter, order preserved."""
        transaction_filter = transaction_filter or TransactionFilter()
        return [t for t in self._transactions if transaction_filter.matches(t)]

    def summary(self) -> LedgerSummary:
        """Income, expense and balance over the whole ledger."""
        income = _sum_amounts(t for t in self._transactions if t.type == TransactionType.INCOME)
        expense = _sum_amounts(t for t in self._transactions if t.type == TransactionType.EXPENSE)
        return LedgerSummary(
            income=income,
            expense=expense,
            balance=income - expense,
        )

    def category_aggregate(self) -> dict[TransactionCategory, Decimal]:
        """
        Expense total per category.

        Categories without expenses are absent. Keys appear in the order
        their first expense appears in the ledger sequence.
        """
        totals: dict[TransactionCategory, Decimal] = {}
        for transaction in self._transactions:
            if transaction.type != TransactionType.EXPENSE:
                continue
            totals[transaction.category] = totals.get(transaction.category, ZERO) + transaction.amount
        return totals

    def monthly_aggregate(
        self,
        reference_date: Optional[dt.date] = None,
        months: int = TREND_MONTHS,
    ) -> list[MonthlyBucket]:
        """
        Income and expense per calendar month over the trailing window.

        The window is the reference month and the months before it,
        oldest first. Transactions dated outside it are ignored.
        """
        reference_date = reference_date or dt.date.today()
        if isinstance(reference_date, dt.datetime):
            reference_date = reference_date.date()

        buckets = []
        for year, month in month_window(reference_date, months):
            start = dt.date(year, month, 1)
            end = dt.date(year, month, monthrange(year, month)[1])
            in_month = [t for t in self._transactions if start <= t.date <= end]
            buckets.append(MonthlyBucket(
                label=start.strftime("%b %Y"),
                year=year,
                month=month,
                start=start,
                end=end,
                income=_sum_amounts(t for t in in_month if t.type == TransactionType.INCOME),
                expense=_sum_amounts(t for t in in_month if t.type == TransactionType.EXPENSE),
            ))
        return buckets
