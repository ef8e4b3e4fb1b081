"""
Voucher domain types (``ledger_kernel.domain.voucher``).

Responsibility
--------------
The voucher lifecycle state machine, voucher-number format, creation
input with its validation, and the read-side voucher / history records.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* ``VOUCHER_TRANSITIONS`` is the only definition of allowed status
  changes.  APPROVED and REJECTED have no outgoing edges.
* amount > 0; type, category and payment_method are required.
* Edits touch only descriptive fields of a PENDING voucher.
* Each voucher item's line_total is quantity x unit_price.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from ledger_kernel.domain.ledger import parse_amount
from ledger_kernel.exceptions import (
    InvalidStateError,
    ValidationError,
    VoucherNotFoundError,
)


# =========================================================================
# Lifecycle
# =========================================================================


class VoucherStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


VOUCHER_TRANSITIONS: dict[VoucherStatus, frozenset[VoucherStatus]] = {
    VoucherStatus.PENDING: frozenset({
        VoucherStatus.APPROVED,
        VoucherStatus.REJECTED,
    }),
    VoucherStatus.APPROVED: frozenset(),
    VoucherStatus.REJECTED: frozenset(),
}

TERMINAL_VOUCHER_STATUSES: frozenset[VoucherStatus] = frozenset(
    status for status, targets in VOUCHER_TRANSITIONS.items() if not targets
)


def check_transition(
    voucher_id: str,
    current: VoucherStatus | str,
    target: VoucherStatus,
) -> None:
    """
    Raises:
        InvalidStateError: If ``current -> target`` is not in the table.
    """
    current = VoucherStatus(current)
    if target not in VOUCHER_TRANSITIONS[current]:
        raise InvalidStateError(
            voucher_id=str(voucher_id),
            current_status=current.value,
            attempted_status=target.value,
        )


class ApprovalAction(str, Enum):
    """History row actions, one per lifecycle event."""

    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# =========================================================================
# Voucher attributes
# =========================================================================


class VoucherType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    BANK = "BANK"
    MOBILE = "MOBILE"
    CARD = "CARD"


DEFAULT_VOUCHER_PREFIXES: dict[VoucherType, str] = {
    VoucherType.INCOME: "INC",
    VoucherType.EXPENSE: "EXP",
    VoucherType.TRANSFER: "TRF",
}

DEFAULT_SEQUENCE_WIDTH = 4


def coerce_voucher_id(voucher_id: UUID | str) -> UUID:
    """
    Raises:
        VoucherNotFoundError: If the id is not a UUID (so cannot exist).
    """
    if isinstance(voucher_id, UUID):
        return voucher_id
    try:
        return UUID(str(voucher_id))
    except ValueError:
        raise VoucherNotFoundError(str(voucher_id)) from None


def format_voucher_no(prefix: str, on_date: date, sequence: int, width: int) -> str:
    """``INC`` + ``20240101`` + ``0001``."""
    return f"{prefix}{on_date:%Y%m%d}{sequence:0{width}d}"


def _parse_enum(enum_cls, field_name: str, value):
    if value is None or value == "":
        raise ValidationError(field_name, "is required")
    try:
        return enum_cls(str(getattr(value, "value", value)).upper())
    except ValueError:
        raise ValidationError(
            field_name, f"must be one of {[m.value for m in enum_cls]}"
        ) from None


def parse_voucher_type(value) -> VoucherType:
    return _parse_enum(VoucherType, "type", value)


def parse_payment_method(value) -> PaymentMethod:
    return _parse_enum(PaymentMethod, "payment_method", value)


def parse_status(value) -> VoucherStatus:
    return _parse_enum(VoucherStatus, "status", value)


# =========================================================================
# Creation and edit input
# =========================================================================


@dataclass(frozen=True)
class VoucherItemInput:
    name: str
    quantity: Decimal
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class VoucherInput:
    """Validated request to create a voucher."""

    type: VoucherType
    category: str
    payment_method: PaymentMethod
    amount: Decimal
    description: str | None = None
    reference: str | None = None
    notes: str | None = None
    items: tuple[VoucherItemInput, ...] = ()

    @classmethod
    def build(
        cls,
        *,
        type,
        category,
        payment_method,
        amount,
        description: str | None = None,
        reference: str | None = None,
        notes: str | None = None,
        items: list[dict] | None = None,
    ) -> VoucherInput:
        """
        Validate raw fields into a VoucherInput.

        Raises:
            ValidationError: Missing field, unknown enum value,
                non-positive amount or a malformed item.
        """
        voucher_type = parse_voucher_type(type)
        method = parse_payment_method(payment_method)
        if category is None or not str(category).strip():
            raise ValidationError("category", "is required")
        value = parse_amount("amount", amount)
        if value is None or value <= 0:
            raise ValidationError("amount", "must be greater than zero")
        return cls(
            type=voucher_type,
            category=str(category).strip().upper(),
            payment_method=method,
            amount=value,
            description=description,
            reference=reference,
            notes=notes,
            items=tuple(_build_item(i, item) for i, item in enumerate(items or ())),
        )


def _build_item(index: int, raw: dict) -> VoucherItemInput:
    name = (raw.get("name") or "").strip()
    if not name:
        raise ValidationError(f"items[{index}].name", "is required")
    quantity = parse_amount(f"items[{index}].quantity", raw.get("quantity", 1))
    unit_price = parse_amount(f"items[{index}].unit_price", raw.get("unit_price"))
    if quantity is None or quantity <= 0:
        raise ValidationError(f"items[{index}].quantity", "must be greater than zero")
    if unit_price is None or unit_price < 0:
        raise ValidationError(f"items[{index}].unit_price", "must not be negative")
    return VoucherItemInput(name=name, quantity=quantity, unit_price=unit_price)


@dataclass(frozen=True)
class VoucherChanges:
    """
    Validated edit of a PENDING voucher.

    Only the descriptive fields may change.  Type stays fixed because it is
    encoded in the voucher number; scope, status and approval fields move
    only through create/approve/reject.
    """

    category: str | None = None
    payment_method: PaymentMethod | None = None
    amount: Decimal | None = None
    description: str | None = None
    reference: str | None = None
    notes: str | None = None

    @classmethod
    def build(
        cls,
        *,
        category=None,
        payment_method=None,
        amount=None,
        description: str | None = None,
        reference: str | None = None,
        notes: str | None = None,
    ) -> VoucherChanges:
        """
        None means "leave unchanged".

        Raises:
            ValidationError: Nothing to change, blank category, unknown
                payment method or non-positive amount.
        """
        if category is not None and not str(category).strip():
            raise ValidationError("category", "must not be blank")
        value = parse_amount("amount", amount)
        if amount is not None and (value is None or value <= 0):
            raise ValidationError("amount", "must be greater than zero")
        changes = cls(
            category=str(category).strip().upper() if category is not None else None,
            payment_method=(
                parse_payment_method(payment_method) if payment_method is not None else None
            ),
            amount=value,
            description=description,
            reference=reference,
            notes=notes,
        )
        if not changes.as_values():
            raise ValidationError("voucher", "no fields to update")
        return changes

    def as_values(self) -> dict:
        """Column values for the fields being changed."""
        values = {
            "category": self.category,
            "payment_method": self.payment_method.value if self.payment_method else None,
            "amount": self.amount,
            "description": self.description,
            "reference": self.reference,
            "notes": self.notes,
        }
        return {key: value for key, value in values.items() if value is not None}


# =========================================================================
# Read-side records
# =========================================================================


@dataclass(frozen=True)
class VoucherItem:
    id: UUID
    name: str
    quantity: Decimal
    unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class VoucherApprovalRecord:
    """One immutable history row."""

    id: UUID
    voucher_id: UUID
    seq: int
    action: str
    performed_by: str
    performed_by_name: str | None
    performed_by_role: str | None
    comments: str | None
    created_at: datetime


@dataclass(frozen=True)
class Voucher:
    id: UUID
    voucher_no: str
    type: str
    category: str
    payment_method: str
    amount: Decimal
    description: str | None
    reference: str | None
    scope_type: str
    scope_id: str
    user_id: str
    user_name: str | None
    user_role: str
    status: str
    approved_by: str | None
    approved_at: datetime | None
    notes: str | None
    rejection_reason: str | None
    created_at: datetime
    updated_at: datetime
    items: tuple[VoucherItem, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class VoucherFilter:
    """Optional list filters; every field narrows the result."""

    type: VoucherType | None = None
    category: str | None = None
    payment_method: PaymentMethod | None = None
    status: VoucherStatus | None = None
    user_id: str | None = None
    search: str | None = None


@dataclass(frozen=True)
class VoucherPage:
    items: tuple[Voucher, ...]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0
