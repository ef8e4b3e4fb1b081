"""
VoucherService -- voucher lifecycle engine.

Responsibility:
    Creates vouchers (allocating the voucher number and writing items and
    the SUBMITTED history row) and drives the one-way transitions
    PENDING -> APPROVED | REJECTED, and edits descriptive fields while a
    voucher is still PENDING.

Architecture position:
    Kernel > Services -- imperative shell.  Writes through the caller's
    session; the caller's ``session_scope()`` commits the status change and
    its history row together.

Invariants enforced:
    - Transitions are checked against VOUCHER_TRANSITIONS before any write.
    - Transitions are linearizable: the status change is a compare-and-set
      ``UPDATE ... WHERE id = :id AND status = 'PENDING'``.  Of two racing
      approvers exactly one sees rowcount 1; the other gets
      InvalidStateError.
    - Every lifecycle event appends exactly one history row, except that an
      admin-created voucher is born APPROVED with only its SUBMITTED row.
    - Only ADMIN may edit, approve or reject.
    - Edits use the same compare-and-set guard as transitions, never
      change status and write no history row.

Failure modes:
    - ValidationError: bad input, missing scope, empty rejection reason.
    - ForbiddenError: non-admin edit/approve/reject, unassigned non-admin
      create.
    - VoucherNotFoundError: unknown voucher id.
    - InvalidStateError: voucher not PENDING (including a lost race).
"""

from typing import Mapping
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ledger_kernel.db.types import round_money
from ledger_kernel.domain.clock import Clock
from ledger_kernel.domain.scope import (
    ActorContext,
    ResolvedScope,
    Role,
    parse_role,
    require_admin,
)
from ledger_kernel.domain.voucher import (
    DEFAULT_SEQUENCE_WIDTH,
    ApprovalAction,
    Voucher,
    VoucherChanges,
    VoucherInput,
    VoucherStatus,
    VoucherType,
    check_transition,
    coerce_voucher_id,
)
from ledger_kernel.exceptions import (
    InvalidStateError,
    ValidationError,
    VoucherNotFoundError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.voucher import FinancialVoucher, VoucherItemModel
from ledger_kernel.services.approval_log import ApprovalLog
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.voucher_number_service import VoucherNumberService

logger = get_logger("services.voucher")


class VoucherService(BaseService):
    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        prefixes: Mapping[VoucherType | str, str] | None = None,
        sequence_width: int = DEFAULT_SEQUENCE_WIDTH,
    ):
        super().__init__(session, clock)
        self._numbers = VoucherNumberService(
            session, self._clock, prefixes=prefixes, sequence_width=sequence_width,
        )
        self._approvals = ApprovalLog(session, self._clock)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create(
        self,
        actor: ActorContext,
        data: VoucherInput,
        scope: ResolvedScope,
    ) -> Voucher:
        """
        Create a voucher in the actor's resolved scope.

        Non-admin vouchers start PENDING.  Admin vouchers are created
        APPROVED with approved_by/approved_at set; their history holds only
        the SUBMITTED row.

        Raises:
            ValidationError: Scope not concrete.
            ForbiddenError: Unknown role.
        """
        role = parse_role(actor)
        scope_type, scope_id = scope.require_concrete()
        now = self._clock.now()
        is_admin = role is Role.ADMIN

        voucher = FinancialVoucher(
            voucher_no=self._numbers.generate_voucher_no(data.type, now.date()),
            type=data.type.value,
            category=data.category,
            payment_method=data.payment_method.value,
            amount=data.amount,
            description=data.description,
            reference=data.reference,
            scope_type=scope_type.value,
            scope_id=scope_id,
            user_id=actor.user_id,
            user_name=actor.user_name,
            user_role=role.value,
            status=(VoucherStatus.APPROVED if is_admin else VoucherStatus.PENDING).value,
            approved_by=actor.user_id if is_admin else None,
            approved_at=now if is_admin else None,
            notes=data.notes,
            created_at=now,
            updated_at=now,
        )
        voucher.items = [
            VoucherItemModel(
                position=position,
                name=item.name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=round_money(item.line_total),
            )
            for position, item in enumerate(data.items)
        ]
        self.session.add(voucher)
        self.session.flush()

        self._approvals.record(voucher.id, ApprovalAction.SUBMITTED, actor, data.notes)

        with LogContext.bind(voucher_id=str(voucher.id), actor_id=actor.user_id):
            logger.info(
                "voucher_created",
                extra={
                    "voucher_no": voucher.voucher_no,
                    "voucher_type": voucher.type,
                    "amount": voucher.amount,
                    "status": voucher.status,
                    "voucher_scope": f"{voucher.scope_type}:{voucher.scope_id}",
                },
            )
        return voucher.to_dto()

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def update(
        self,
        actor: ActorContext,
        voucher_id: UUID | str,
        changes: VoucherChanges,
    ) -> Voucher:
        """
        Edit a PENDING voucher in place.  Status is never touched.

        Raises:
            ForbiddenError: Actor is not ADMIN.
            VoucherNotFoundError: Unknown voucher.
            InvalidStateError: Voucher is already APPROVED or REJECTED.
        """
        require_admin(actor, "update_voucher")
        vid = coerce_voucher_id(voucher_id)
        current = self._current_status(vid)
        if current is not VoucherStatus.PENDING:
            raise InvalidStateError(str(vid), current.value, VoucherStatus.PENDING.value)

        values = changes.as_values()
        self._compare_and_set(
            vid, VoucherStatus.PENDING, {**values, "updated_at": self._clock.now()},
        )

        with LogContext.bind(voucher_id=str(vid), actor_id=actor.user_id):
            logger.info("voucher_updated", extra={"fields": sorted(values)})
        return self._reload(vid)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def approve(
        self,
        actor: ActorContext,
        voucher_id: UUID | str,
        notes: str | None = None,
    ) -> Voucher:
        """
        PENDING -> APPROVED.

        Raises:
            ForbiddenError: Actor is not ADMIN.
            VoucherNotFoundError: Unknown voucher.
            InvalidStateError: Voucher is not PENDING.
        """
        require_admin(actor, "approve_voucher")
        vid = coerce_voucher_id(voucher_id)
        check_transition(vid, self._current_status(vid), VoucherStatus.APPROVED)

        now = self._clock.now()
        values = {
            "status": VoucherStatus.APPROVED.value,
            "approved_by": actor.user_id,
            "approved_at": now,
            "updated_at": now,
        }
        if notes is not None:
            values["notes"] = notes
        self._compare_and_set(vid, VoucherStatus.APPROVED, values)
        self._approvals.record(vid, ApprovalAction.APPROVED, actor, notes)

        with LogContext.bind(voucher_id=str(vid), actor_id=actor.user_id):
            logger.info("voucher_approved", extra={"approved_by": actor.user_id})
        return self._reload(vid)

    def reject(
        self,
        actor: ActorContext,
        voucher_id: UUID | str,
        rejection_reason: str | None,
        notes: str | None = None,
    ) -> Voucher:
        """
        PENDING -> REJECTED.  approved_by records the rejecting admin;
        approved_at stays empty.

        Raises:
            ForbiddenError: Actor is not ADMIN.
            ValidationError: Empty rejection reason.
            VoucherNotFoundError: Unknown voucher.
            InvalidStateError: Voucher is not PENDING.
        """
        require_admin(actor, "reject_voucher")
        reason = (rejection_reason or "").strip()
        if not reason:
            raise ValidationError("rejection_reason", "is required")
        vid = coerce_voucher_id(voucher_id)
        check_transition(vid, self._current_status(vid), VoucherStatus.REJECTED)

        values = {
            "status": VoucherStatus.REJECTED.value,
            "approved_by": actor.user_id,
            "rejection_reason": reason,
            "updated_at": self._clock.now(),
        }
        if notes is not None:
            values["notes"] = notes
        self._compare_and_set(vid, VoucherStatus.REJECTED, values)
        self._approvals.record(vid, ApprovalAction.REJECTED, actor, reason)

        with LogContext.bind(voucher_id=str(vid), actor_id=actor.user_id):
            logger.info(
                "voucher_rejected",
                extra={"rejected_by": actor.user_id, "rejection_reason": reason},
            )
        return self._reload(vid)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _current_status(self, vid: UUID) -> VoucherStatus:
        status = self.session.execute(
            select(FinancialVoucher.status).where(FinancialVoucher.id == vid)
        ).scalar_one_or_none()
        if status is None:
            raise VoucherNotFoundError(str(vid))
        return VoucherStatus(status)

    def _compare_and_set(self, vid: UUID, target: VoucherStatus, values: dict) -> None:
        result = self.session.execute(
            update(FinancialVoucher)
            .where(
                FinancialVoucher.id == vid,
                FinancialVoucher.status == VoucherStatus.PENDING.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            current = self._current_status(vid)
            logger.warning(
                "voucher_transition_lost",
                extra={
                    "voucher_id": str(vid),
                    "current_status": current.value,
                    "attempted_status": target.value,
                },
            )
            raise InvalidStateError(str(vid), current.value, target.value)

    def _reload(self, vid: UUID) -> Voucher:
        voucher = self.session.get(FinancialVoucher, vid, populate_existing=True)
        return voucher.to_dto()
