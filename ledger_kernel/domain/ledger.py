"""
Ledger domain types (``ledger_kernel.domain.ledger``).

Responsibility
--------------
Value objects for subject ledger entries: subjects, entry types, the
append input, the read-side record and the date-range filter.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* Debit XOR credit: exactly one of debit_amount / credit_amount is
  populated, and it is strictly positive (``validate_amounts``).
* Subject keys have the form ``"<SUBJECT_TYPE>:<subject_id>"``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any
from uuid import UUID

from ledger_kernel.exceptions import InvalidQueryError, ValidationError


class SubjectType(str, Enum):
    CUSTOMER = "CUSTOMER"
    COMPANY = "COMPANY"
    BRANCH = "BRANCH"
    WAREHOUSE = "WAREHOUSE"


class EntryType(str, Enum):
    SALE = "SALE"
    PAYMENT = "PAYMENT"
    ADJUSTMENT = "ADJUSTMENT"
    COMPANY_TRANSACTION = "COMPANY_TRANSACTION"
    RETURN = "RETURN"
    OPENING_BALANCE = "OPENING_BALANCE"


@dataclass(frozen=True)
class SubjectRef:
    """Explicit reference to the party a ledger entry belongs to."""

    subject_type: SubjectType
    subject_id: str

    @property
    def key(self) -> str:
        return f"{self.subject_type.value}:{self.subject_id}"

    @classmethod
    def of(cls, subject_type: str | SubjectType, subject_id: Any) -> SubjectRef:
        """
        Raises:
            ValidationError: Unknown subject type or empty id.
        """
        try:
            kind = SubjectType(str(getattr(subject_type, "value", subject_type)).upper())
        except ValueError:
            raise ValidationError(
                "subject_type", f"must be one of {[s.value for s in SubjectType]}"
            ) from None
        if subject_id is None or not str(subject_id).strip():
            raise ValidationError("subject_id", "is required")
        return cls(kind, str(subject_id).strip())

    @classmethod
    def parse(cls, key: str) -> SubjectRef:
        """
        Parse ``"CUSTOMER:42"`` into a SubjectRef.

        Raises:
            InvalidQueryError: If the key is malformed.
        """
        kind, sep, subject_id = (key or "").partition(":")
        if not sep or not subject_id:
            raise InvalidQueryError(
                "subject_key", key, "expected <SUBJECT_TYPE>:<subject_id>"
            )
        try:
            return cls.of(kind, subject_id)
        except ValidationError as exc:
            raise InvalidQueryError("subject_key", key, exc.reason) from None


# Numeric(18, 2) columns
MONEY_QUANTUM = Decimal("0.01")
MAX_MONEY = Decimal("1E16")


def parse_amount(field: str, value: Any) -> Decimal | None:
    """
    Decimal from user input; None and zero both mean "side not used".

    Amounts must fit the money columns exactly: at most two decimal
    places (trailing zeros are fine) and fewer than 17 integer digits.
    Nothing is rounded, so what is stored equals what was sent.
    """
    if value is None or value == "":
        return None
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(field, f"not a number: {value!r}") from None
    if not amount.is_finite():
        raise ValidationError(field, "must be finite")
    if abs(amount) >= MAX_MONEY:
        raise ValidationError(field, "too large")
    quantized = amount.quantize(MONEY_QUANTUM)
    if quantized != amount:
        raise ValidationError(field, "at most 2 decimal places")
    return quantized


def validate_amounts(
    debit_amount: Decimal | None,
    credit_amount: Decimal | None,
) -> tuple[Decimal | None, Decimal | None]:
    """
    Enforce debit XOR credit with the populated side > 0.

    Zero is treated as absent, so (500, 0) is a debit of 500.

    Raises:
        ValidationError: Both sides, neither side, or a negative side.
    """
    debit = parse_amount("debit_amount", debit_amount)
    credit = parse_amount("credit_amount", credit_amount)
    for field, amount in (("debit_amount", debit), ("credit_amount", credit)):
        if amount is not None and amount < 0:
            raise ValidationError(field, "must not be negative")
    debit = debit or None
    credit = credit or None
    if debit is not None and credit is not None:
        raise ValidationError(
            "debit_amount", "an entry carries either a debit or a credit, not both"
        )
    if debit is None and credit is None:
        raise ValidationError(
            "debit_amount", "an entry needs a positive debit or credit amount"
        )
    return debit, credit


def parse_entry_type(value: str | EntryType) -> EntryType:
    """
    Raises:
        ValidationError: Unknown entry type.
    """
    try:
        return EntryType(str(getattr(value, "value", value)).upper())
    except ValueError:
        raise ValidationError(
            "entry_type", f"must be one of {[e.value for e in EntryType]}"
        ) from None


@dataclass(frozen=True)
class LedgerEntryInput:
    """What a caller supplies to append one movement."""

    subject: SubjectRef
    entry_type: EntryType
    debit_amount: Decimal | None = None
    credit_amount: Decimal | None = None
    description: str | None = None
    reference_type: str | None = None
    reference_id: str | None = None


@dataclass(frozen=True)
class LedgerEntryRecord:
    """Read-side view of a persisted ledger entry."""

    id: UUID
    seq: int
    subject_type: str | None
    subject_id: str | None
    subject_key: str | None
    entry_type: str
    debit_amount: Decimal | None
    credit_amount: Decimal | None
    description: str | None
    reference_type: str | None
    reference_id: str | None
    scope_type: str | None
    scope_id: str | None
    performed_by: str
    created_at: datetime


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive calendar-day range.  Either end may be open.

    Dates are interpreted in UTC.
    """

    start: date | None = None
    end: date | None = None

    def __post_init__(self):
        if self.start and self.end and self.start > self.end:
            raise InvalidQueryError(
                "date_range",
                f"{self.start.isoformat()}..{self.end.isoformat()}",
                "start date is after end date",
            )

    @classmethod
    def parse(cls, start: str | date | None, end: str | date | None) -> DateRange:
        """
        Build a range from ISO date strings.

        Raises:
            InvalidQueryError: Unparseable date or start after end.
        """
        return cls(_parse_date("date_from", start), _parse_date("date_to", end))

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None

    def bounds(self) -> tuple[datetime | None, datetime | None]:
        """(inclusive lower, exclusive upper) timestamps in UTC."""
        lower = (
            datetime.combine(self.start, time.min, tzinfo=timezone.utc)
            if self.start
            else None
        )
        upper = (
            datetime.combine(self.end + timedelta(days=1), time.min, tzinfo=timezone.utc)
            if self.end
            else None
        )
        return lower, upper

    def predicates(self, column: Any) -> list[Any]:
        """SQL predicates restricting a timestamp column to this range."""
        lower, upper = self.bounds()
        clauses = []
        if lower is not None:
            clauses.append(column >= lower)
        if upper is not None:
            clauses.append(column < upper)
        return clauses


def _parse_date(parameter: str, value: str | date | None) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return value
    else:
        text = str(value).strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidQueryError(parameter, value, "expected YYYY-MM-DD") from None
    # a full timestamp names the UTC day it falls on
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


@dataclass(frozen=True)
class SubjectBalance:
    """Totals and balance for one subject within one scope."""

    subject_key: str
    total_debits: Decimal
    total_credits: Decimal
    balance: Decimal
    entry_count: int


@dataclass(frozen=True)
class TransactionResult:
    """Outcome of recording a bill/payment pair against a subject."""

    subject_key: str
    previous_balance: Decimal
    new_balance: Decimal
    entries: tuple[LedgerEntryRecord, ...]


@dataclass(frozen=True)
class StatementLine:
    entry: LedgerEntryRecord
    running_balance: Decimal


@dataclass(frozen=True)
class LedgerStatement:
    """Ordered entries with the balance after each one."""

    subject_key: str
    opening_balance: Decimal
    lines: tuple[StatementLine, ...]
    closing_balance: Decimal
