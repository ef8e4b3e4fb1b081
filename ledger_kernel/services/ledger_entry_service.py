"""
LedgerEntryService -- append-only writes to the subject ledger.

Responsibility:
    Validates and appends ledger entries, and records sale-style
    transactions (a bill and a payment against one subject) returning the
    subject's previous and new running balance.

Architecture position:
    Kernel > Services.  Reads balances through LedgerSelector and computes
    them through ledger_kernel.domain.balance.

Invariants enforced:
    - Debit XOR credit with the populated side > 0, checked before any
      write (ValidationError).
    - Every entry gets a server timestamp from the injected clock and a
      ``seq`` from the subject's locked counter, unique and increasing
      within that subject.
    - record_transaction holds the subject lock from the balance read to
      the writes, so concurrent transactions on one subject chain their
      balances instead of both starting from the same previous balance.
    - Entries are written into the caller's resolved scope.  A cashier's
      entries always land in their own branch.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from ledger_kernel.domain.balance import apply_transaction
from ledger_kernel.domain.clock import Clock
from ledger_kernel.domain.ledger import (
    EntryType,
    LedgerEntryInput,
    LedgerEntryRecord,
    SubjectRef,
    TransactionResult,
    parse_amount,
    validate_amounts,
)
from ledger_kernel.domain.scope import ResolvedScope
from ledger_kernel.exceptions import ValidationError
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.ledger_entry import LedgerEntry
from ledger_kernel.selectors.ledger_selector import LedgerSelector
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.sequence_service import SequenceService

logger = get_logger("services.ledger_entry")


class LedgerEntryService(BaseService):
    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session, clock)
        self._sequences = SequenceService(session)

    def append(
        self,
        entry: LedgerEntryInput,
        scope: ResolvedScope,
        performed_by: str,
        created_at: datetime | None = None,
    ) -> LedgerEntryRecord:
        """
        Append one entry. Flushes, never commits.

        Args:
            entry: Subject, type and exactly one positive amount.
            scope: Resolved scope of the acting user.  All-scopes writes an
                unscoped entry; a scope type without an id is rejected.
            performed_by: Acting user id.
            created_at: Override for imported historical rows.

        Raises:
            ValidationError: Amount rule violated, or partial scope.
        """
        debit, credit = validate_amounts(entry.debit_amount, entry.credit_amount)
        if scope.scope_type is not None and scope.scope_id is None:
            raise ValidationError("scope_id", "required when writing a scoped entry")

        row = LedgerEntry(
            seq=self._sequences.next_subject_seq(entry.subject.key),
            subject_type=entry.subject.subject_type.value,
            subject_id=entry.subject.subject_id,
            subject_key=entry.subject.key,
            entry_type=entry.entry_type.value,
            debit_amount=debit,
            credit_amount=credit,
            description=entry.description,
            reference_type=entry.reference_type,
            reference_id=entry.reference_id,
            scope_type=scope.scope_type.value if scope.scope_type else None,
            scope_id=scope.scope_id,
            performed_by=performed_by,
            created_at=created_at or self._clock.now(),
        )
        self.session.add(row)
        self.session.flush()

        with LogContext.bind(subject_key=entry.subject.key, scope=str(scope)):
            logger.info(
                "ledger_entry_appended",
                extra={
                    "entry_id": str(row.id),
                    "seq": row.seq,
                    "entry_type": row.entry_type,
                    "debit_amount": debit,
                    "credit_amount": credit,
                },
            )
        return row.to_dto()

    def record_transaction(
        self,
        subject: SubjectRef,
        bill_amount: Decimal,
        payment_amount: Decimal,
        scope: ResolvedScope,
        performed_by: str,
        description: str | None = None,
        reference_type: str | None = None,
        reference_id: str | None = None,
    ) -> TransactionResult:
        """
        Record a bill and the payment received against it.

        Writes a SALE debit for a non-zero bill and a PAYMENT credit for a
        non-zero payment.  The returned new_balance is
        apply_transaction(previous_balance, bill, payment), which equals the
        subject's balance read back after the writes.

        Raises:
            ValidationError: Negative amounts, or both amounts zero.
        """
        bill = parse_amount("bill_amount", bill_amount) or Decimal("0")
        payment = parse_amount("payment_amount", payment_amount) or Decimal("0")
        if not bill and not payment:
            raise ValidationError("bill_amount", "bill or payment must be non-zero")

        self._sequences.lock_subject(subject.key)
        previous = LedgerSelector(self.session).balance(subject, scope).balance
        new_balance = apply_transaction(previous, bill, payment)

        entries = []
        if bill:
            entries.append(self.append(
                LedgerEntryInput(
                    subject=subject,
                    entry_type=EntryType.SALE,
                    debit_amount=bill,
                    description=description,
                    reference_type=reference_type,
                    reference_id=reference_id,
                ),
                scope,
                performed_by,
            ))
        if payment:
            entries.append(self.append(
                LedgerEntryInput(
                    subject=subject,
                    entry_type=EntryType.PAYMENT,
                    credit_amount=payment,
                    description=description,
                    reference_type=reference_type,
                    reference_id=reference_id,
                ),
                scope,
                performed_by,
            ))

        logger.info(
            "ledger_transaction_recorded",
            extra={
                "subject_key": subject.key,
                "previous_balance": previous,
                "new_balance": new_balance,
            },
        )
        return TransactionResult(
            subject_key=subject.key,
            previous_balance=previous,
            new_balance=new_balance,
            entries=tuple(entries),
        )
