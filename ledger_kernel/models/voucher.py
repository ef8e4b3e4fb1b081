"""
Module: ledger_kernel.models.voucher
Responsibility: ORM persistence for financial vouchers, their line items
    and their approval history.

Architecture position: Kernel > Models.  May import from db/ and domain/.

Invariants enforced:
    - voucher_no is unique (backs the locked-counter allocation).
    - amount > 0 and status within the lifecycle enum (CHECK constraints).
    - VoucherApprovalModel rows are append-only: ORM listeners reject
      UPDATE and DELETE.  ``seq`` numbers a voucher's history from 1.

Failure modes:
    - IntegrityError on duplicate voucher_no.
    - ImmutabilityViolationError on history UPDATE/DELETE.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import Base, UUIDString
from ledger_kernel.domain.voucher import (
    Voucher,
    VoucherApprovalRecord,
    VoucherItem,
)
from ledger_kernel.exceptions import ImmutabilityViolationError


class FinancialVoucher(Base):
    """
    Persistent voucher.

    Contract:
        Status moves PENDING -> APPROVED | REJECTED exactly once, through a
        compare-and-set UPDATE in VoucherService.  approved_by/approved_at
        are set on approval; rejection_reason on rejection.
    """

    __tablename__ = "financial_vouchers"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_financial_vouchers_amount_positive"),
        CheckConstraint(
            "status IN ('PENDING', 'APPROVED', 'REJECTED')",
            name="ck_financial_vouchers_valid_status",
        ),
        Index("ix_financial_vouchers_scope", "scope_type", "scope_id"),
        Index("ix_financial_vouchers_status_created", "status", "created_at"),
    )

    voucher_no: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)

    scope_type: Mapped[str] = mapped_column(String(20), nullable=False)
    scope_id: Mapped[str] = mapped_column(String(50), nullable=False)

    user_id: Mapped[str] = mapped_column(String(50), nullable=False)
    user_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    user_role: Mapped[str] = mapped_column(String(30), nullable=False)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")
    approved_by: Mapped[str | None] = mapped_column(String(50), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    items: Mapped[list[VoucherItemModel]] = relationship(
        "VoucherItemModel",
        back_populates="voucher",
        order_by="VoucherItemModel.position",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<FinancialVoucher {self.voucher_no} {self.type} {self.amount} {self.status}>"

    def to_dto(self) -> Voucher:
        """Convert ORM model to frozen domain DTO."""
        return Voucher(
            id=self.id,
            voucher_no=self.voucher_no,
            type=self.type,
            category=self.category,
            payment_method=self.payment_method,
            amount=self.amount,
            description=self.description,
            reference=self.reference,
            scope_type=self.scope_type,
            scope_id=self.scope_id,
            user_id=self.user_id,
            user_name=self.user_name,
            user_role=self.user_role,
            status=self.status,
            approved_by=self.approved_by,
            approved_at=self.approved_at,
            notes=self.notes,
            rejection_reason=self.rejection_reason,
            created_at=self.created_at,
            updated_at=self.updated_at,
            items=tuple(item.to_dto() for item in self.items),
        )


class VoucherItemModel(Base):
    """Line item on a voucher; line_total is stored as quantity x unit_price."""

    __tablename__ = "voucher_items"

    voucher_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("financial_vouchers.id"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    line_total: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    voucher: Mapped[FinancialVoucher] = relationship(
        "FinancialVoucher", back_populates="items",
    )

    def to_dto(self) -> VoucherItem:
        return VoucherItem(
            id=self.id,
            name=self.name,
            quantity=self.quantity,
            unit_price=self.unit_price,
            line_total=self.line_total,
        )


class VoucherApprovalModel(Base):
    """Persistent history row for one voucher lifecycle event. Append-only."""

    __tablename__ = "voucher_approvals"

    __table_args__ = (
        CheckConstraint(
            "action IN ('SUBMITTED', 'APPROVED', 'REJECTED')",
            name="ck_voucher_approvals_valid_action",
        ),
        UniqueConstraint("voucher_id", "seq", name="uq_voucher_approvals_voucher_seq"),
        Index("ix_voucher_approvals_voucher_order", "voucher_id", "created_at", "seq"),
    )

    voucher_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("financial_vouchers.id"),
        nullable=False,
    )
    seq: Mapped[int] = mapped_column(BigInteger, nullable=False)
    action: Mapped[str] = mapped_column(String(20), nullable=False)
    performed_by: Mapped[str] = mapped_column(String(50), nullable=False)
    performed_by_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    performed_by_role: Mapped[str | None] = mapped_column(String(30), nullable=True)
    comments: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<VoucherApproval voucher={self.voucher_id} {self.action} by={self.performed_by}>"

    def to_dto(self) -> VoucherApprovalRecord:
        return VoucherApprovalRecord(
            id=self.id,
            voucher_id=self.voucher_id,
            seq=self.seq,
            action=self.action,
            performed_by=self.performed_by,
            performed_by_name=self.performed_by_name,
            performed_by_role=self.performed_by_role,
            comments=self.comments,
            created_at=self.created_at,
        )


# =============================================================================
# ORM-Level Immutability for history rows (Append-Only)
# =============================================================================


@event.listens_for(VoucherApprovalModel, "before_update")
def prevent_voucher_approval_update(mapper, connection, target):
    """Prevent updates to voucher history rows."""
    raise ImmutabilityViolationError(
        entity_type="VoucherApproval",
        entity_id=str(target.id),
        reason="Voucher history is append-only -- cannot modify",
    )


@event.listens_for(VoucherApprovalModel, "before_delete")
def prevent_voucher_approval_delete(mapper, connection, target):
    """Prevent deletion of voucher history rows."""
    raise ImmutabilityViolationError(
        entity_type="VoucherApproval",
        entity_id=str(target.id),
        reason="Voucher history is append-only -- cannot delete",
    )
