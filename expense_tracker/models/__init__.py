"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the ledger must conform to these schemas.
"""

from expense_tracker.models.transaction import (
    ALL,
    CategoryChartData,
    LedgerSummary,
    MonthlyBucket,
    MonthlyChartData,
    Transaction,
    TransactionCategory,
    TransactionFilter,
    TransactionType,
)
from expense_tracker.models.session import (
    LedgerView,
    Notice,
    NoticeLevel,
    OperationResult,
)

__all__ = [
    # Transaction models
    "ALL",
    "CategoryChartData",
    "LedgerSummary",
    "MonthlyBucket",
    "MonthlyChartData",
    "Transaction",
    "TransactionCategory",
    "TransactionFilter",
    "TransactionType",
    # Session models
    "LedgerView",
    "Notice",
    "NoticeLevel",
    "OperationResult",
]
