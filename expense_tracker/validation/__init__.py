"""Input validation package."""

from expense_tracker.validation.validator import (
    AMOUNT_DECIMAL_PLACES,
    MAX_AMOUNT,
    TransactionValidator,
    ValidatedInput,
    ValidationError,
    ValidationIssue,
    parse_amount,
)

__all__ = [
    "AMOUNT_DECIMAL_PLACES",
    "MAX_AMOUNT",
    "TransactionValidator",
    "ValidatedInput",
    "ValidationError",
    "ValidationIssue",
    "parse_amount",
]
