"""
Legacy subject backfill.

Older ledger rows identified their customer or company only inside the
free-text description.  ``backfill_subject_from_description`` assigns an
explicit subject to each such row once, by case-insensitive substring
match against known subject names, and moves it into that subject's
``seq`` numbering.  Rows matching no name, or more than one, are left
untouched and reported.

This is the only place in the code base that matches subjects by text.
"""

from dataclasses import dataclass, field
from typing import Mapping
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.domain.ledger import SubjectRef
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.ledger_entry import LedgerEntry
from ledger_kernel.services.sequence_service import SequenceService

logger = get_logger("services.migration")


@dataclass
class BackfillReport:
    assigned: dict[UUID, str] = field(default_factory=dict)
    ambiguous: dict[UUID, list[str]] = field(default_factory=dict)
    unmatched: list[UUID] = field(default_factory=list)


def backfill_subject_from_description(
    session: Session,
    subjects_by_name: Mapping[str, SubjectRef],
) -> BackfillReport:
    """
    Assign subjects to ledger rows that have none.

    Args:
        session: Caller-owned session; changes are flushed, not committed.
        subjects_by_name: Display name -> subject, e.g.
            {"Ali Traders": SubjectRef(SubjectType.CUSTOMER, "42")}.

    Returns:
        BackfillReport listing assigned, ambiguous and unmatched row ids.
    """
    needles = [
        (name.strip().lower(), subject)
        for name, subject in subjects_by_name.items()
        if name and name.strip()
    ]
    report = BackfillReport()
    sequences = SequenceService(session)

    rows = session.execute(
        select(LedgerEntry)
        .where(LedgerEntry.subject_key.is_(None))
        .order_by(LedgerEntry.created_at, LedgerEntry.seq)
    ).scalars().all()

    for row in rows:
        text = (row.description or "").lower()
        matches = {subject.key: subject for name, subject in needles if name in text}
        if len(matches) == 1:
            subject = next(iter(matches.values()))
            # allocate before touching the row; the counter flush must not
            # write a half-filled subject
            row.seq = sequences.next_subject_seq(subject.key)
            row.subject_type = subject.subject_type.value
            row.subject_id = subject.subject_id
            row.subject_key = subject.key
            report.assigned[row.id] = subject.key
        elif matches:
            report.ambiguous[row.id] = sorted(matches)
        else:
            report.unmatched.append(row.id)

    session.flush()
    logger.info(
        "legacy_subject_backfill_completed",
        extra={
            "assigned": len(report.assigned),
            "ambiguous": len(report.ambiguous),
            "unmatched": len(report.unmatched),
        },
    )
    return report
