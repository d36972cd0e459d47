"""
Core Data Models for Expense Tracker

These models define the strict schemas for all data flowing through the ledger.
They are designed to:
1. Enforce the ledger invariants at construction time
2. Provide clear validation error messages
3. Be serializable for storage
4. Be plain data that any rendering technology can consume

DESIGN DECISION: Transactions are frozen Pydantic models.
A transaction is never edited in place; it is only created or deleted.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Literal, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
)


ALL = "all"


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionCategory(str, Enum):
    """
    Supported transaction categories.

    DESIGN DECISION: Using explicit categories rather than free text ensures
    consistent grouping in the category aggregate.
    """
    FOOD = "food"
    TRANSPORT = "transport"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    BILLS = "bills"
    HEALTHCARE = "healthcare"
    EDUCATION = "education"
    SALARY = "salary"
    FREELANCE = "freelance"
    INVESTMENT = "investment"
    OTHER = "other"

    @property
    def label(self) -> str:
        """Display label, e.g. 'Food'."""
        return self.value.capitalize()


class TransactionType(str, Enum):
    """
    Direction of a transaction.

    CRITICAL: Direction lives here and only here.
    Amounts are always positive.
    """
    INCOME = "income"
    EXPENSE = "expense"


# =============================================================================
# CORE TRANSACTION MODEL
# =============================================================================

class Transaction(BaseModel):
    """
    One recorded income or expense event.

    The creation timestamp is kept for ordering of insertion only;
    every financial calculation uses `date`.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    id: int = Field(
        ...,
        ge=0,
        description="Unique ledger identifier, used as the deletion key"
    )
    description: str = Field(
        ...,
        min_length=1,
        description="What the transaction was for"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Positive amount in currency units"
    )
    category: TransactionCategory
    type: TransactionType
    date: dt.date = Field(
        ...,
        description="Calendar date the transaction occurred"
    )
    created_at: dt.datetime = Field(
        default_factory=_utcnow,
        validation_alias=AliasChoices("created_at", "createdAt", "timestamp"),
        serialization_alias="createdAt",
        description="When the record was created"
    )

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE


# =============================================================================
# FILTER
# =============================================================================

class TransactionFilter(BaseModel):
    """
    Transient view restriction by category and/or type.

    Never persisted. Filters affect only the displayed list,
    never the financial totals.
    """
    model_config = ConfigDict(frozen=True)

    category: Union[TransactionCategory, Literal["all"]] = ALL
    type: Union[TransactionType, Literal["all"]] = ALL

    def matches(self, transaction: Transaction) -> bool:
        category_match = self.category == ALL or transaction.category == self.category
        type_match = self.type == ALL or transaction.type == self.type
        return category_match and type_match

    @property
    def is_default(self) -> bool:
        return self.category == ALL and self.type == ALL

    @classmethod
    def cleared(cls) -> "TransactionFilter":
        """The default {all, all} filter."""
        return cls()


# =============================================================================
# DERIVED VIEWS
# =============================================================================

class LedgerSummary(BaseModel):
    """Totals over the full ledger."""
    model_config = ConfigDict(frozen=True)

    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")

    @property
    def is_positive(self) -> bool:
        """Balance is zero or above (presentation colours it green)."""
        return self.balance >= 0


class MonthlyBucket(BaseModel):
    """
    One calendar month's slice of the rolling trend window.

    `start` and `end` are inclusive.
    """
    model_config = ConfigDict(frozen=True)

    label: str = Field(
        ...,
        description="Short month and year, e.g. 'Jan 2024'"
    )
    year: int
    month: int = Field(..., ge=1, le=12)
    start: dt.date
    end: dt.date
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")

    @property
    def net(self) -> Decimal:
        return self.income - self.expense

    def contains(self, day: dt.date) -> bool:
        return self.start <= day <= self.end


class CategoryChartData(BaseModel):
    """Parallel label/value lists for a category-distribution chart."""

    labels: list[str] = Field(default_factory=list)
    data: list[Decimal] = Field(default_factory=list)


class MonthlyChartData(BaseModel):
    """Parallel label/value lists for the monthly income vs expenses chart."""

    labels: list[str] = Field(default_factory=list)
    income: list[Decimal] = Field(default_factory=list)
    expenses: list[Decimal] = Field(default_factory=list)
