"""
Module: ledger_kernel.models.financial_account
Responsibility: ORM persistence for named balance buckets (till cash, bank
    account, mobile wallet) held by a branch or warehouse.

Architecture position: Kernel > Models.  May import from db/ and domain/.

current_balance changes only through FinancialAccountService.set_balance.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Index, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base
from ledger_kernel.domain.account import FinancialAccountRecord


class FinancialAccount(Base):
    __tablename__ = "financial_accounts"

    __table_args__ = (
        UniqueConstraint(
            "scope_type", "scope_id", "account_name",
            name="uq_financial_accounts_scope_name",
        ),
        Index("ix_financial_accounts_scope", "scope_type", "scope_id"),
    )

    account_name: Mapped[str] = mapped_column(String(255), nullable=False)
    account_type: Mapped[str] = mapped_column(String(20), nullable=False)
    scope_type: Mapped[str] = mapped_column(String(20), nullable=False)
    scope_id: Mapped[str] = mapped_column(String(50), nullable=False)
    current_balance: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, default=Decimal("0"),
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<FinancialAccount {self.account_name} {self.scope_type}:{self.scope_id}>"

    def to_dto(self) -> FinancialAccountRecord:
        return FinancialAccountRecord(
            id=self.id,
            account_name=self.account_name,
            account_type=self.account_type,
            scope_type=self.scope_type,
            scope_id=self.scope_id,
            current_balance=self.current_balance,
            is_active=self.is_active,
            last_updated=self.last_updated,
        )
