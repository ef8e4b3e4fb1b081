"""
VoucherNumberService -- human-readable voucher numbers.

Format: type prefix + YYYYMMDD + zero-padded daily sequence, e.g.
``INC202401010001``.  The daily sequence comes from a locked counter row
per (prefix, date), so concurrent creators never receive the same number.
The unique constraint on financial_vouchers.voucher_no backs this up.
"""

from datetime import date
from typing import Mapping

from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.voucher import (
    DEFAULT_SEQUENCE_WIDTH,
    DEFAULT_VOUCHER_PREFIXES,
    VoucherType,
    format_voucher_no,
    parse_voucher_type,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.services.sequence_service import SequenceService

logger = get_logger("services.voucher_number")


class VoucherNumberService:
    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        prefixes: Mapping[VoucherType | str, str] | None = None,
        sequence_width: int = DEFAULT_SEQUENCE_WIDTH,
    ):
        self._sequences = SequenceService(session)
        self._clock = clock or SystemClock()
        self._prefixes = {
            parse_voucher_type(kind): prefix
            for kind, prefix in (prefixes or DEFAULT_VOUCHER_PREFIXES).items()
        }
        self._width = sequence_width

    def prefix_for(self, voucher_type: VoucherType | str) -> str:
        return self._prefixes[parse_voucher_type(voucher_type)]

    def generate_voucher_no(
        self,
        voucher_type: VoucherType | str,
        on_date: date | None = None,
    ) -> str:
        """
        Allocate the next voucher number for a type and calendar day.

        Args:
            voucher_type: INCOME, EXPENSE or TRANSFER.
            on_date: Day embedded in the number; defaults to the clock's today.

        Raises:
            ValidationError: Unknown voucher type.
        """
        prefix = self.prefix_for(voucher_type)
        day = on_date or self._clock.today()
        sequence = self._sequences.next_daily_value(prefix, day)
        voucher_no = format_voucher_no(prefix, day, sequence, self._width)
        logger.debug("voucher_number_allocated", extra={"voucher_no": voucher_no})
        return voucher_no
