"""
Transaction Input Validation

DESIGN DECISION: Every field of an add request is checked before the
ledger is touched, and every problem is reported at once.

CHECKS:
- description: non-empty after trimming whitespace
- amount: a finite number greater than zero with at most two decimal
  places and below MAX_AMOUNT (zero, NaN, negative, sub-cent and
  unparseable input are all rejected)
- category: present and one of the known categories
- type: income or expense
- date: present and a real calendar date

IMPORTANT: Validation NEVER silently fixes issues beyond trimming.
It reports them so the user can correct the form and retry.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Any, NamedTuple, Optional, Union

from pydantic import BaseModel, Field

from expense_tracker.models.transaction import TransactionCategory, TransactionType


# Currency precision; with the upper bound an amount never exceeds 15
# significant digits and survives storage as a JSON number unchanged.
AMOUNT_DECIMAL_PLACES = 2
MAX_AMOUNT = Decimal("9999999999999.99")


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'not_a_number')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationError(ValueError):
    """
    Raised when an add request is missing or has an invalid field.

    Recoverable: the caller shows `message` to the user and nothing changes.
    """

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__(self.message)

    @property
    def fields(self) -> list[str]:
        return [issue.field for issue in self.issues]

    @property
    def message(self) -> str:
        if not self.issues:
            return "Invalid transaction"
        return "; ".join(issue.message for issue in self.issues)


class ValidatedInput(NamedTuple):
    """Cleaned values ready to become a Transaction."""
    description: str
    amount: Decimal
    category: TransactionCategory
    type: TransactionType
    date: dt.date


AmountInput = Union[Decimal, int, float, str, None]
DateInput = Union[dt.date, str, None]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _coerce_amount(raw: AmountInput) -> tuple[Optional[Decimal], Optional[ValidationIssue]]:
    if _is_blank(raw):
        return None, ValidationIssue(
            field="amount",
            issue_type="missing",
            message="Amount is required",
        )
    if isinstance(raw, bool) or not isinstance(raw, (Decimal, int, float, str)):
        return None, ValidationIssue(
            field="amount",
            issue_type="not_a_number",
            message=f"Amount must be a number, got {type(raw).__name__}",
        )

    try:
        # str() first so floats keep the digits the user typed
        amount = raw if isinstance(raw, Decimal) else Decimal(str(raw).strip())
    except InvalidOperation:
        return None, ValidationIssue(
            field="amount",
            issue_type="not_a_number",
            message=f"Amount '{raw}' is not a number",
        )

    if not amount.is_finite():
        return None, ValidationIssue(
            field="amount",
            issue_type="not_a_number",
            message="Amount must be a finite number",
        )
    if amount <= 0:
        return None, ValidationIssue(
            field="amount",
            issue_type="invalid_value",
            message="Amount must be greater than zero",
        )
    if -amount.normalize().as_tuple().exponent > AMOUNT_DECIMAL_PLACES:
        return None, ValidationIssue(
            field="amount",
            issue_type="invalid_value",
            message=f"Amount can have at most {AMOUNT_DECIMAL_PLACES} decimal places",
        )
    if amount > MAX_AMOUNT:
        return None, ValidationIssue(
            field="amount",
            issue_type="invalid_value",
            message=f"Amount must not exceed {MAX_AMOUNT}",
        )
    return amount, None


def parse_amount(raw: AmountInput) -> Decimal:
    """
    Parse a raw form amount into a positive Decimal.

    Raises:
        ValidationError: empty, non-numeric, NaN, infinite, zero, negative,
            sub-cent or oversized input
    """
    amount, issue = _coerce_amount(raw)
    if issue is not None:
        raise ValidationError([issue])
    return amount


class TransactionValidator:
    """
    Validates the fields of an add request.

    Stateless; one instance can serve a whole session.
    """

    def _check_description(self, raw: Any, issues: list[ValidationIssue]) -> Optional[str]:
        if _is_blank(raw) or not isinstance(raw, str):
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is required",
            ))
            return None
        return raw.strip()

    def _check_category(self, raw: Any, issues: list[ValidationIssue]) -> Optional[TransactionCategory]:
        if _is_blank(raw):
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required",
            ))
            return None
        if isinstance(raw, TransactionCategory):
            return raw
        try:
            return TransactionCategory(str(raw).strip().lower())
        except ValueError:
            issues.append(ValidationIssue(
                field="category",
                issue_type="invalid_value",
                message=f"Unknown category '{raw}'",
            ))
            return None

    def _check_type(self, raw: Any, issues: list[ValidationIssue]) -> Optional[TransactionType]:
        if _is_blank(raw):
            issues.append(ValidationIssue(
                field="type",
                issue_type="missing",
                message="Type is required (income or expense)",
            ))
            return None
        if isinstance(raw, TransactionType):
            return raw
        try:
            return TransactionType(str(raw).strip().lower())
        except ValueError:
            issues.append(ValidationIssue(
                field="type",
                issue_type="invalid_value",
                message=f"Type must be income or expense, got '{raw}'",
            ))
            return None

    def _check_date(self, raw: Any, issues: list[ValidationIssue]) -> Optional[dt.date]:
        if _is_blank(raw):
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required",
            ))
            return None
        # datetime is a date subclass; drop the time part
        if isinstance(raw, dt.datetime):
            return raw.date()
        if isinstance(raw, dt.date):
            return raw
        if isinstance(raw, str):
            try:
                return dt.date.fromisoformat(raw.strip())
            except ValueError:
                pass
        issues.append(ValidationIssue(
            field="date",
            issue_type="invalid_format",
            message=f"Date '{raw}' is not a valid YYYY-MM-DD date",
        ))
        return None

    def validate(
        self,
        description: Any,
        amount: AmountInput,
        category: Any,
        type: Any,
        date: DateInput,
    ) -> ValidatedInput:
        """
        Check every field and return the cleaned values.

        Raises:
            ValidationError: listing every failed field
        """
        issues: list[ValidationIssue] = []

        clean_description = self._check_description(description, issues)

        clean_amount, amount_issue = _coerce_amount(amount)
        if amount_issue is not None:
            issues.append(amount_issue)

        clean_category = self._check_category(category, issues)
        clean_type = self._check_type(type, issues)
        clean_date = self._check_date(date, issues)

        if issues:
            raise ValidationError(issues)

        return ValidatedInput(
            description=clean_description,
            amount=clean_amount,
            category=clean_category,
            type=clean_type,
            date=clean_date,
        )
