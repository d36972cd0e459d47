"""Ledger package."""

from expense_tracker.ledger.ledger import (
    TREND_MONTHS,
    Ledger,
    TransactionIdGenerator,
    month_window,
)

__all__ = ["TREND_MONTHS", "Ledger", "TransactionIdGenerator", "month_window"]
