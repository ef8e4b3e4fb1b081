"""
Module: ledger_kernel.models.ledger_entry
Responsibility: ORM persistence for subject ledger entries.

Architecture position: Kernel > Models.  May import from db/ and domain/.

Invariants enforced:
    - Debit XOR credit, populated side > 0 (CHECK constraint backs the
      service-level validation).
    - Append-only.  The ORM listeners below reject UPDATE and DELETE, with
      one exception: a row written before subjects were explicit
      (subject_key IS NULL) may have its subject assigned once, taking a
      new ``seq`` in that subject's sequence at the same time.
    - ``seq`` is unique per subject and totally orders a subject's entries
      that share created_at.

Failure modes:
    - ImmutabilityViolationError on UPDATE/DELETE through the ORM.
    - IntegrityError if the CHECK or unique constraints are bypassed.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    Index,
    Numeric,
    String,
    UniqueConstraint,
    event,
    inspect,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.orm.attributes import get_history

from ledger_kernel.db.base import Base
from ledger_kernel.domain.ledger import LedgerEntryRecord
from ledger_kernel.exceptions import ImmutabilityViolationError

SUBJECT_FIELDS = ("subject_type", "subject_id", "subject_key")


class LedgerEntry(Base):
    """One immutable signed movement on a subject's running balance."""

    __tablename__ = "ledger_entries"

    __table_args__ = (
        CheckConstraint(
            "(debit_amount IS NOT NULL AND debit_amount > 0 AND credit_amount IS NULL)"
            " OR "
            "(credit_amount IS NOT NULL AND credit_amount > 0 AND debit_amount IS NULL)",
            name="ck_ledger_entries_debit_xor_credit",
        ),
        UniqueConstraint("subject_key", "seq", name="uq_ledger_entries_subject_seq"),
        Index("ix_ledger_entries_subject_order", "subject_key", "created_at", "seq"),
        Index("ix_ledger_entries_scope", "scope_type", "scope_id"),
        Index("ix_ledger_entries_created_at", "created_at"),
    )

    seq: Mapped[int] = mapped_column(BigInteger, nullable=False)

    subject_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    subject_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    subject_key: Mapped[str | None] = mapped_column(String(80), nullable=True)

    entry_type: Mapped[str] = mapped_column(String(30), nullable=False)
    debit_amount: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    credit_amount: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    reference_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    reference_id: Mapped[str | None] = mapped_column(String(50), nullable=True)

    scope_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    scope_id: Mapped[str | None] = mapped_column(String(50), nullable=True)

    performed_by: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        side = f"dr={self.debit_amount}" if self.debit_amount else f"cr={self.credit_amount}"
        return f"<LedgerEntry #{self.seq} {self.subject_key} {self.entry_type} {side}>"

    def to_dto(self) -> LedgerEntryRecord:
        """Convert ORM model to frozen domain record."""
        return LedgerEntryRecord(
            id=self.id,
            seq=self.seq,
            subject_type=self.subject_type,
            subject_id=self.subject_id,
            subject_key=self.subject_key,
            entry_type=self.entry_type,
            debit_amount=_as_decimal(self.debit_amount),
            credit_amount=_as_decimal(self.credit_amount),
            description=self.description,
            reference_type=self.reference_type,
            reference_id=self.reference_id,
            scope_type=self.scope_type,
            scope_id=self.scope_id,
            performed_by=self.performed_by,
            created_at=self.created_at,
        )


def _as_decimal(value) -> Decimal | None:
    return Decimal(value) if value is not None else None


def _is_subject_assignment(target: LedgerEntry) -> bool:
    """
    True if the pending change only fills a previously empty subject.

    The row may be renumbered into the new subject's sequence in the same
    flush; ``seq`` cannot change on its own.
    """
    changed = {}
    for attr in inspect(target).mapper.column_attrs:
        hist = get_history(target, attr.key)
        if hist.has_changes():
            changed[attr.key] = hist
    if "subject_key" not in changed:
        return False
    for key, hist in changed.items():
        if key == "seq":
            continue
        if key not in SUBJECT_FIELDS:
            return False
        if any(old is not None for old in hist.deleted):
            return False
    return True


@event.listens_for(LedgerEntry, "before_update")
def prevent_ledger_entry_update(mapper, connection, target):
    """Reject updates other than a one-time subject assignment."""
    if _is_subject_assignment(target):
        return
    raise ImmutabilityViolationError(
        entity_type="LedgerEntry",
        entity_id=str(target.id),
        reason="Ledger entries are append-only -- cannot modify",
    )


@event.listens_for(LedgerEntry, "before_delete")
def prevent_ledger_entry_delete(mapper, connection, target):
    raise ImmutabilityViolationError(
        entity_type="LedgerEntry",
        entity_id=str(target.id),
        reason="Ledger entries are append-only -- cannot delete",
    )
