"""
Tests for SummarySelector over a mixed-status fixture.

Financial totals include APPROVED vouchers only; PENDING and REJECTED
vouchers show up in status_summary and nowhere else.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from ledger_kernel.domain.ledger import (
    DateRange,
    EntryType,
    LedgerEntryInput,
    SubjectRef,
    SubjectType,
)
from ledger_kernel.domain.scope import ResolvedScope, resolve_scope
from ledger_kernel.domain.voucher import VoucherInput
from ledger_kernel.selectors.summary_selector import SummarySelector
from ledger_kernel.services.ledger_entry_service import LedgerEntryService
from ledger_kernel.services.voucher_service import VoucherService


def _voucher(type_, amount, method="CASH", category="SALES"):
    return VoucherInput.build(type=type_, category=category, payment_method=method, amount=amount)


@pytest.fixture
def mixed(session, clock, admin, cashier, other_cashier):
    """
    Jan 1, branch 1 (cashier):
        INCOME   1000 CASH  approved
        EXPENSE   200 BANK  approved
        INCOME    500 CASH  pending
        EXPENSE    50 CASH  rejected
    Jan 2, branch 1:
        TRANSFER  300 BANK  approved
    Jan 2, branch 2 (other_cashier):
        INCOME    700 MOBILE approved
    """
    service = VoucherService(session, clock)
    b1 = resolve_scope(cashier)
    b2 = resolve_scope(other_cashier)

    v = service.create(cashier, _voucher("INCOME", "1000"), b1)
    service.approve(admin, v.id)
    v = service.create(cashier, _voucher("EXPENSE", "200", "BANK", "RENT"), b1)
    service.approve(admin, v.id)
    service.create(cashier, _voucher("INCOME", "500"), b1)
    v = service.create(cashier, _voucher("EXPENSE", "50"), b1)
    service.reject(admin, v.id, "duplicate")

    clock.set_time(datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc))
    v = service.create(cashier, _voucher("TRANSFER", "300", "BANK", "TRANSFER"), b1)
    service.approve(admin, v.id)
    v = service.create(other_cashier, _voucher("INCOME", "700", "MOBILE"), b2)
    service.approve(admin, v.id)


class TestDailySummary:

    def test_all_scopes_newest_first(self, session, mixed):
        rows = SummarySelector(session).daily_summary(ResolvedScope.all_scopes())
        assert [r.day for r in rows] == [date(2024, 1, 2), date(2024, 1, 1)]
        jan2, jan1 = rows
        assert (jan1.total_income, jan1.total_expense, jan1.total_transfer) == (
            Decimal("1000.00"), Decimal("200.00"), Decimal("0.00"),
        )
        assert jan1.transaction_count == 2
        assert jan1.net == Decimal("800.00")
        assert (jan2.total_income, jan2.total_transfer, jan2.transaction_count) == (
            Decimal("700.00"), Decimal("300.00"), 2,
        )

    def test_cashier_scope(self, session, mixed, cashier):
        rows = SummarySelector(session).daily_summary(resolve_scope(cashier, "BRANCH", "2"))
        assert sum(r.total_income for r in rows) == Decimal("1000.00")

    def test_date_range(self, session, mixed):
        rows = SummarySelector(session).daily_summary(
            ResolvedScope.all_scopes(), DateRange(date(2024, 1, 1), date(2024, 1, 1)),
        )
        assert [r.day for r in rows] == [date(2024, 1, 1)]


class TestPaymentMethodSummary:

    def test_grouped_by_method(self, session, mixed):
        rows = SummarySelector(session).payment_method_summary(ResolvedScope.all_scopes())
        by_method = {r.payment_method: r for r in rows}
        assert set(by_method) == {"BANK", "CASH", "MOBILE"}
        assert by_method["CASH"].total_income == Decimal("1000.00")
        assert by_method["CASH"].total_expense == Decimal("0.00")
        assert by_method["BANK"].total_expense == Decimal("200.00")
        assert by_method["BANK"].total_transfer == Decimal("300.00")


class TestScopeSummary:

    def test_grouped_by_branch(self, session, mixed):
        rows = SummarySelector(session).scope_summary(ResolvedScope.all_scopes())
        assert [(r.scope_id, r.transaction_count) for r in rows] == [("1", 3), ("2", 1)]
        assert rows[1].total_income == Decimal("700.00")


class TestFinancialSummary:

    def test_grouped_by_type_category_method_scope(self, session, mixed):
        rows = SummarySelector(session).financial_summary(ResolvedScope.all_scopes())
        keys = [(r.type, r.category, r.payment_method, r.scope_id, r.total_amount) for r in rows]
        assert keys == [
            ("EXPENSE", "RENT", "BANK", "1", Decimal("200.00")),
            ("INCOME", "SALES", "CASH", "1", Decimal("1000.00")),
            ("INCOME", "SALES", "MOBILE", "2", Decimal("700.00")),
            ("TRANSFER", "TRANSFER", "BANK", "1", Decimal("300.00")),
        ]


class TestStatusSummary:

    def test_every_status_reported(self, session, mixed):
        rows = SummarySelector(session).status_summary(ResolvedScope.all_scopes())
        assert {r.status: (r.transaction_count, r.total_amount) for r in rows} == {
            "PENDING": (1, Decimal("500.00")),
            "APPROVED": (4, Decimal("2200.00")),
            "REJECTED": (1, Decimal("50.00")),
        }

    def test_empty_store_reports_zeros(self, session, cashier):
        rows = SummarySelector(session).status_summary(resolve_scope(cashier))
        assert [(r.status, r.transaction_count) for r in rows] == [
            ("PENDING", 0), ("APPROVED", 0), ("REJECTED", 0),
        ]


class TestLedgerDailyTotals:

    def test_debits_and_credits_per_day(self, session, clock, cashier):
        scope = resolve_scope(cashier)
        service = LedgerEntryService(session, clock)
        subject = SubjectRef(SubjectType.CUSTOMER, "42")
        service.record_transaction(subject, Decimal("500"), Decimal("200"), scope, cashier.user_id)
        clock.set_time(datetime(2024, 1, 2, 8, 0, tzinfo=timezone.utc))
        service.append(
            LedgerEntryInput(subject=subject, entry_type=EntryType.ADJUSTMENT,
                             credit_amount=Decimal("25")),
            scope,
            cashier.user_id,
        )

        rows = SummarySelector(session).ledger_daily_totals(scope)

        assert [(r.day, r.total_debits, r.total_credits, r.entry_count) for r in rows] == [
            (date(2024, 1, 1), Decimal("500.00"), Decimal("200.00"), 2),
            (date(2024, 1, 2), Decimal("0.00"), Decimal("25.00"), 1),
        ]
        assert rows[0].net == Decimal("300.00")
