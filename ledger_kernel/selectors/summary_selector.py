"""
Module: ledger_kernel.selectors.summary_selector
Responsibility: Grouped financial summaries over vouchers and ledger
    entries for reporting.

Architecture position: Kernel > Selectors.

Invariants enforced:
    - Financial totals (daily, payment method, scope, financial summary)
      count APPROVED vouchers only.  PENDING and REJECTED vouchers appear
      solely in status_summary, always reported per status.
    - Every query honours the caller's ResolvedScope and optional
      DateRange on created_at.
    - Amounts leave this module as Decimal rounded by round_money().
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import Date, case, func, select

from ledger_kernel.db.types import to_money
from ledger_kernel.domain.ledger import DateRange
from ledger_kernel.domain.scope import ResolvedScope
from ledger_kernel.domain.voucher import VoucherStatus, VoucherType
from ledger_kernel.models.ledger_entry import LedgerEntry
from ledger_kernel.models.voucher import FinancialVoucher
from ledger_kernel.selectors.base import BaseSelector


class _NetIncome:
    total_income: Decimal
    total_expense: Decimal

    @property
    def net(self) -> Decimal:
        """Income minus expense; transfers move money without changing it."""
        return self.total_income - self.total_expense


@dataclass
class DailySummaryRow(_NetIncome):
    """Approved totals for one calendar day."""

    day: date
    total_income: Decimal
    total_expense: Decimal
    total_transfer: Decimal
    transaction_count: int


@dataclass
class PaymentMethodSummaryRow(_NetIncome):
    payment_method: str
    total_income: Decimal
    total_expense: Decimal
    total_transfer: Decimal
    transaction_count: int


@dataclass
class ScopeSummaryRow(_NetIncome):
    scope_type: str
    scope_id: str
    total_income: Decimal
    total_expense: Decimal
    total_transfer: Decimal
    transaction_count: int


@dataclass
class FinancialSummaryRow:
    type: str
    category: str
    payment_method: str
    scope_type: str
    scope_id: str
    total_amount: Decimal
    transaction_count: int


@dataclass
class StatusSummaryRow:
    status: str
    total_amount: Decimal
    transaction_count: int


@dataclass
class LedgerDailyTotalRow:
    day: date
    total_debits: Decimal
    total_credits: Decimal
    entry_count: int

    @property
    def net(self) -> Decimal:
        """Debits minus credits for the day."""
        return self.total_debits - self.total_credits


def _sum_of_type(voucher_type: VoucherType):
    return func.coalesce(
        func.sum(
            case(
                (FinancialVoucher.type == voucher_type.value, FinancialVoucher.amount),
                else_=0,
            )
        ),
        0,
    )


def _totals_columns():
    return (
        _sum_of_type(VoucherType.INCOME).label("total_income"),
        _sum_of_type(VoucherType.EXPENSE).label("total_expense"),
        _sum_of_type(VoucherType.TRANSFER).label("total_transfer"),
        func.count(FinancialVoucher.id).label("transaction_count"),
    )


def _totals(row) -> dict:
    return {
        "total_income": to_money(row.total_income),
        "total_expense": to_money(row.total_expense),
        "total_transfer": to_money(row.total_transfer),
        "transaction_count": int(row.transaction_count),
    }


def _as_date(value) -> date:
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    return value


class SummarySelector(BaseSelector):
    """Read-only reporting queries."""

    def _voucher_conditions(
        self,
        scope: ResolvedScope,
        date_range: DateRange | None,
        status: VoucherStatus | None = VoucherStatus.APPROVED,
    ) -> list:
        conditions = scope.predicates(FinancialVoucher.scope_type, FinancialVoucher.scope_id)
        if status is not None:
            conditions.append(FinancialVoucher.status == status.value)
        if date_range is not None:
            conditions.extend(date_range.predicates(FinancialVoucher.created_at))
        return conditions

    def daily_summary(
        self,
        scope: ResolvedScope,
        date_range: DateRange | None = None,
    ) -> list[DailySummaryRow]:
        """Approved totals per calendar day, newest day first."""
        day = func.date(FinancialVoucher.created_at, type_=Date).label("day")
        rows = self.session.execute(
            select(day, *_totals_columns())
            .where(*self._voucher_conditions(scope, date_range))
            .group_by(day)
            .order_by(day.desc())
        )
        return [DailySummaryRow(day=_as_date(row.day), **_totals(row)) for row in rows]

    def payment_method_summary(
        self,
        scope: ResolvedScope,
        date_range: DateRange | None = None,
    ) -> list[PaymentMethodSummaryRow]:
        """Approved totals per payment method."""
        rows = self.session.execute(
            select(FinancialVoucher.payment_method, *_totals_columns())
            .where(*self._voucher_conditions(scope, date_range))
            .group_by(FinancialVoucher.payment_method)
            .order_by(FinancialVoucher.payment_method)
        )
        return [
            PaymentMethodSummaryRow(payment_method=row.payment_method, **_totals(row))
            for row in rows
        ]

    def scope_summary(
        self,
        scope: ResolvedScope,
        date_range: DateRange | None = None,
    ) -> list[ScopeSummaryRow]:
        """Approved totals per branch / warehouse."""
        rows = self.session.execute(
            select(FinancialVoucher.scope_type, FinancialVoucher.scope_id, *_totals_columns())
            .where(*self._voucher_conditions(scope, date_range))
            .group_by(FinancialVoucher.scope_type, FinancialVoucher.scope_id)
            .order_by(FinancialVoucher.scope_type, FinancialVoucher.scope_id)
        )
        return [
            ScopeSummaryRow(scope_type=row.scope_type, scope_id=row.scope_id, **_totals(row))
            for row in rows
        ]

    def financial_summary(
        self,
        scope: ResolvedScope,
        date_range: DateRange | None = None,
    ) -> list[FinancialSummaryRow]:
        """Approved amount and count per type, category, payment method and scope."""
        group = (
            FinancialVoucher.type,
            FinancialVoucher.category,
            FinancialVoucher.payment_method,
            FinancialVoucher.scope_type,
            FinancialVoucher.scope_id,
        )
        rows = self.session.execute(
            select(
                *group,
                func.coalesce(func.sum(FinancialVoucher.amount), 0).label("total_amount"),
                func.count(FinancialVoucher.id).label("transaction_count"),
            )
            .where(*self._voucher_conditions(scope, date_range))
            .group_by(*group)
            .order_by(*group)
        )
        return [
            FinancialSummaryRow(
                type=row.type,
                category=row.category,
                payment_method=row.payment_method,
                scope_type=row.scope_type,
                scope_id=row.scope_id,
                total_amount=to_money(row.total_amount),
                transaction_count=int(row.transaction_count),
            )
            for row in rows
        ]

    def status_summary(
        self,
        scope: ResolvedScope,
        date_range: DateRange | None = None,
    ) -> list[StatusSummaryRow]:
        """Count and amount per status; every status is present, even at zero."""
        rows = self.session.execute(
            select(
                FinancialVoucher.status,
                func.coalesce(func.sum(FinancialVoucher.amount), 0).label("total_amount"),
                func.count(FinancialVoucher.id).label("transaction_count"),
            )
            .where(*self._voucher_conditions(scope, date_range, status=None))
            .group_by(FinancialVoucher.status)
        )
        found = {row.status: row for row in rows}
        result = []
        for status in VoucherStatus:
            row = found.get(status.value)
            result.append(
                StatusSummaryRow(
                    status=status.value,
                    total_amount=to_money(row.total_amount if row else None),
                    transaction_count=int(row.transaction_count) if row else 0,
                )
            )
        return result

    def ledger_daily_totals(
        self,
        scope: ResolvedScope,
        date_range: DateRange | None = None,
    ) -> list[LedgerDailyTotalRow]:
        """Debit and credit totals of ledger entries per calendar day."""
        day = func.date(LedgerEntry.created_at, type_=Date).label("day")
        conditions = scope.predicates(LedgerEntry.scope_type, LedgerEntry.scope_id)
        if date_range is not None:
            conditions.extend(date_range.predicates(LedgerEntry.created_at))
        rows = self.session.execute(
            select(
                day,
                func.coalesce(func.sum(LedgerEntry.debit_amount), 0).label("total_debits"),
                func.coalesce(func.sum(LedgerEntry.credit_amount), 0).label("total_credits"),
                func.count(LedgerEntry.id).label("entry_count"),
            )
            .where(*conditions)
            .group_by(day)
            .order_by(day)
        )
        return [
            LedgerDailyTotalRow(
                day=_as_date(row.day),
                total_debits=to_money(row.total_debits),
                total_credits=to_money(row.total_credits),
                entry_count=int(row.entry_count),
            )
            for row in rows
        ]
