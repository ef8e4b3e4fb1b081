"""
Module: ledger_kernel.selectors.ledger_selector
Responsibility: Read-only subject ledger queries: ordered entries, balances
    and running-balance statements.

Architecture position: Kernel > Selectors.

Invariants enforced:
    - Entries are totally ordered by (created_at, seq).
    - Every balance is computed by ledger_kernel.domain.balance; this module
      never adds debits and credits itself.
    - No stored balances: everything derives from ledger_entries rows at
      query time.

Failure modes:
    - InvalidQueryError for an unknown entry type.  Inverted or unparseable
      date ranges are rejected earlier, when the DateRange is built.
    - Returns an empty list / zero balance when nothing matches.
"""

from sqlalchemy import select

from ledger_kernel.domain import balance as calculator
from ledger_kernel.domain.ledger import (
    DateRange,
    EntryType,
    LedgerEntryRecord,
    LedgerStatement,
    StatementLine,
    SubjectBalance,
    SubjectRef,
    parse_entry_type,
)
from ledger_kernel.domain.scope import ResolvedScope, apply_scope
from ledger_kernel.exceptions import InvalidQueryError, ValidationError
from ledger_kernel.models.ledger_entry import LedgerEntry
from ledger_kernel.selectors.base import BaseSelector


class LedgerSelector(BaseSelector):
    """Scoped reads over one subject's ledger."""

    def _subject_query(self, subject: SubjectRef, scope: ResolvedScope):
        stmt = select(LedgerEntry).where(LedgerEntry.subject_key == subject.key)
        return apply_scope(
            stmt, scope, LedgerEntry.scope_type, LedgerEntry.scope_id
        ).order_by(LedgerEntry.created_at, LedgerEntry.seq)

    def entries(
        self,
        subject: SubjectRef,
        scope: ResolvedScope,
        entry_type: EntryType | str | None = None,
        date_range: DateRange | None = None,
    ) -> list[LedgerEntryRecord]:
        """
        Entries for a subject, oldest first.

        Raises:
            InvalidQueryError: Unknown entry type.
        """
        stmt = self._subject_query(subject, scope)
        if entry_type is not None:
            try:
                kind = parse_entry_type(entry_type)
            except ValidationError:
                raise InvalidQueryError(
                    "entry_type", entry_type, "unknown entry type"
                ) from None
            stmt = stmt.where(LedgerEntry.entry_type == kind.value)
        if date_range is not None:
            stmt = stmt.where(*date_range.predicates(LedgerEntry.created_at))
        return [row.to_dto() for row in self.session.execute(stmt).scalars()]

    def balance(
        self,
        subject: SubjectRef,
        scope: ResolvedScope,
        date_range: DateRange | None = None,
    ) -> SubjectBalance:
        """Debit/credit totals and the resulting balance (debits - credits)."""
        entries = self.entries(subject, scope, date_range=date_range)
        total_debits, total_credits = calculator.totals(entries)
        return SubjectBalance(
            subject_key=subject.key,
            total_debits=total_debits,
            total_credits=total_credits,
            balance=calculator.fold(entries),
            entry_count=len(entries),
        )

    def statement(
        self,
        subject: SubjectRef,
        scope: ResolvedScope,
        date_range: DateRange | None = None,
    ) -> LedgerStatement:
        """
        Ledger statement with the running balance after every entry.

        With a start date, the opening balance is the fold of every entry
        before that date, so running balances match an unfiltered statement.
        """
        opening = calculator.ZERO
        if date_range is not None and date_range.start is not None:
            lower, _ = date_range.bounds()
            earlier = self.session.execute(
                self._subject_query(subject, scope).where(LedgerEntry.created_at < lower)
            ).scalars()
            opening = calculator.fold(row.to_dto() for row in earlier)

        entries = self.entries(subject, scope, date_range=date_range)
        running = calculator.running_balances(entries, opening=opening)
        return LedgerStatement(
            subject_key=subject.key,
            opening_balance=opening,
            lines=tuple(
                StatementLine(entry=entry, running_balance=value)
                for entry, value in zip(entries, running)
            ),
            closing_balance=running[-1] if running else opening,
        )
