"""
Session Models for Expense Tracker

What the session controller hands back to the presentation layer:
notices for the user, the outcome of each mutation, and the
read-only view that is re-rendered after every state change.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from expense_tracker.models.transaction import (
    CategoryChartData,
    LedgerSummary,
    MonthlyBucket,
    MonthlyChartData,
    Transaction,
    TransactionCategory,
    TransactionFilter,
)


class NoticeLevel(str, Enum):
    """How a notice should be styled."""
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Notice(BaseModel):
    """A non-fatal message for the user."""

    level: NoticeLevel
    message: str


class OperationResult(BaseModel):
    """
    Outcome of a mutating session operation.

    `changed` says whether the in-memory ledger changed.
    `persisted` says whether that change reached storage; when it is
    False after a change, the user must be warned it may not survive a reload.
    """

    changed: bool
    persisted: bool = False
    transaction: Optional[Transaction] = None
    notice: Notice

    @property
    def ok(self) -> bool:
        return self.notice.level in (NoticeLevel.SUCCESS, NoticeLevel.INFO)


class LedgerView(BaseModel):
    """
    Everything the presentation layer renders.

    CRITICAL: `summary` and both aggregates are computed over the full
    ledger. Only `transactions` honours the active filter.
    """

    filter: TransactionFilter
    transactions: list[Transaction] = Field(
        default_factory=list,
        description="Filtered list, newest first"
    )
    summary: LedgerSummary
    category_totals: dict[TransactionCategory, Decimal] = Field(
        default_factory=dict,
        description="Expense totals per category, in first-occurrence order"
    )
    monthly: list[MonthlyBucket] = Field(default_factory=list)
    category_chart: CategoryChartData
    monthly_chart: MonthlyChartData

    @property
    def is_empty(self) -> bool:
        """Nothing to list under the active filter."""
        return not self.transactions
