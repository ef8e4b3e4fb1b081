"""
SequenceService -- monotonic sequence allocation via locked counter rows.

Responsibility:
    Provides the per-subject ``seq`` of ledger entries and the daily
    sequence inside voucher numbers.  Every allocation locks a single
    counter row (``SELECT ... FOR UPDATE``) and increments it.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.
    Called by LedgerEntryService, the legacy backfill and
    VoucherNumberService.

Invariants enforced:
    - The aggregate-max-plus-one pattern is never used: the locked counter
      row is the sole source of truth for the next value.
    - Contention is per key.  Two subjects, or two voucher prefixes, never
      wait on each other.
    - Transactional: an increment is only visible after the caller's
      transaction commits.  Rollback returns the value.

Failure modes:
    - IntegrityError: concurrent first-row creation race, handled via
      savepoint rollback and re-read under lock.
"""

from datetime import date
from typing import Callable, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.sequence import LedgerSubjectCounter, VoucherNumberCounter

logger = get_logger("services.sequence")

CounterT = TypeVar("CounterT")


def lock_counter_row(
    session: Session,
    stmt: Select,
    new_row: Callable[[], CounterT],
) -> tuple[CounterT, bool]:
    """
    Return the counter row selected by ``stmt``, locked for update.

    Creates it with ``new_row()`` if it does not exist yet.  The insert runs
    in a savepoint so losing a creation race to another transaction only
    discards the savepoint; the winner's row is then re-read under lock.

    Returns:
        (row, created) -- created is True if this call inserted the row.
    """
    locked = stmt.with_for_update().execution_options(populate_existing=True)

    row = session.execute(locked).scalar_one_or_none()
    if row is not None:
        return row, False

    savepoint = session.begin_nested()
    try:
        row = new_row()
        session.add(row)
        session.flush()
        savepoint.commit()
        return row, True
    except IntegrityError:
        logger.debug("sequence_counter_race_retry", extra={"statement": str(stmt)})
        savepoint.rollback()
        return session.execute(locked).scalar_one(), False


class SequenceService:
    """
    Service for generating transactional sequence numbers.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
    """

    def __init__(self, session: Session):
        self._session = session

    def lock_subject(self, subject_key: str) -> LedgerSubjectCounter:
        """
        Lock a subject's counter row until the caller's transaction ends.

        Held by anything that reads a subject's balance and then writes
        against it, so concurrent writers of one subject queue up.
        """
        counter, _ = lock_counter_row(
            self._session,
            select(LedgerSubjectCounter).where(
                LedgerSubjectCounter.subject_key == subject_key
            ),
            lambda: LedgerSubjectCounter(subject_key=subject_key, last_seq=0),
        )
        return counter

    def next_subject_seq(self, subject_key: str) -> int:
        """
        Next ``seq`` in a subject's ledger, starting at 1.

        Postconditions:
            Strictly greater than any previously committed value for this
            subject.
        """
        counter = self.lock_subject(subject_key)
        counter.last_seq += 1
        self._session.flush()

        logger.debug(
            "subject_seq_allocated",
            extra={"subject_key": subject_key, "value": counter.last_seq},
        )
        return counter.last_seq

    def next_daily_value(self, prefix: str, on_date: date) -> int:
        """
        Next value of the per-(prefix, date) sequence, starting at 1 each day.
        """
        counter, created = lock_counter_row(
            self._session,
            select(VoucherNumberCounter).where(
                VoucherNumberCounter.prefix == prefix,
                VoucherNumberCounter.counter_date == on_date,
            ),
            lambda: VoucherNumberCounter(
                prefix=prefix, counter_date=on_date, last_value=1,
            ),
        )
        if not created:
            counter.last_value += 1
            self._session.flush()

        logger.debug(
            "daily_sequence_allocated",
            extra={
                "prefix": prefix,
                "counter_date": on_date,
                "value": counter.last_value,
            },
        )
        return counter.last_value
