"""
Module: ledger_kernel.models.sequence
Responsibility: Locked counter rows: the per-subject ledger ``seq`` (which
    doubles as the subject's write lock) and daily voucher numbers.

Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - One row per subject key; one row per (prefix, counter_date).
    - Values only ever increase, and only under a row lock.
"""

from datetime import date

from sqlalchemy import BigInteger, Date, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base


class LedgerSubjectCounter(Base):
    """
    Last ``seq`` given to an entry of one subject.

    Locking this row serializes writers of that subject only; other
    subjects append in parallel.
    """

    __tablename__ = "ledger_subject_counters"

    subject_key: Mapped[str] = mapped_column(String(80), nullable=False, unique=True)
    last_seq: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<LedgerSubjectCounter {self.subject_key}={self.last_seq}>"


class VoucherNumberCounter(Base):
    """Last allocated daily sequence for one voucher-number prefix."""

    __tablename__ = "voucher_number_counters"

    __table_args__ = (
        UniqueConstraint(
            "prefix", "counter_date",
            name="uq_voucher_number_counters_prefix_date",
        ),
    )

    prefix: Mapped[str] = mapped_column(String(10), nullable=False)
    counter_date: Mapped[date] = mapped_column(Date, nullable=False)
    last_value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<VoucherNumberCounter {self.prefix}{self.counter_date:%Y%m%d}={self.last_value}>"
