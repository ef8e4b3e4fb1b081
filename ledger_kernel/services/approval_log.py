"""
ApprovalLog -- append-only voucher history.

Every lifecycle event (SUBMITTED, APPROVED, REJECTED) becomes exactly one
VoucherApprovalModel row, written in the same transaction as the status
change it records.  Rows are ordered by (created_at, seq).

``seq`` numbers one voucher's history from 1.  Callers already hold that
voucher's row (freshly inserted, or locked by the status compare-and-set),
so reading the voucher's current maximum cannot race; the (voucher_id, seq)
unique constraint rejects anything that slips past.
"""

from uuid import UUID

from sqlalchemy import func, select

from ledger_kernel.domain.scope import ActorContext
from ledger_kernel.domain.voucher import ApprovalAction, VoucherApprovalRecord
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.voucher import VoucherApprovalModel
from ledger_kernel.services.base import BaseService

logger = get_logger("services.approval_log")


class ApprovalLog(BaseService):
    def _next_seq(self, voucher_id: UUID) -> int:
        last = self.session.execute(
            select(func.coalesce(func.max(VoucherApprovalModel.seq), 0))
            .where(VoucherApprovalModel.voucher_id == voucher_id)
        ).scalar_one()
        return int(last) + 1

    def record(
        self,
        voucher_id: UUID,
        action: ApprovalAction,
        actor: ActorContext,
        comments: str | None = None,
    ) -> VoucherApprovalRecord:
        """Append one history row. Flushes, never commits."""
        row = VoucherApprovalModel(
            voucher_id=voucher_id,
            seq=self._next_seq(voucher_id),
            action=action.value,
            performed_by=actor.user_id,
            performed_by_name=actor.user_name,
            performed_by_role=str(actor.role).upper(),
            comments=comments,
            created_at=self._clock.now(),
        )
        self.session.add(row)
        self.session.flush()

        logger.info(
            "voucher_history_recorded",
            extra={
                "voucher_id": str(voucher_id),
                "seq": row.seq,
                "action": action.value,
                "performed_by": actor.user_id,
            },
        )
        return row.to_dto()
