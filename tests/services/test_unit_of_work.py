"""
Unit-of-work behaviour of session_scope(): a failure anywhere inside the
block leaves no partial write behind, and connection-level driver errors
surface as StoreUnavailableError.
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from ledger_kernel.db.engine import session_scope
from ledger_kernel.domain.clock import DeterministicClock
from ledger_kernel.domain.scope import ResolvedScope, resolve_scope
from ledger_kernel.domain.voucher import VoucherInput
from ledger_kernel.exceptions import StoreUnavailableError
from ledger_kernel.models.voucher import FinancialVoucher, VoucherApprovalModel
from ledger_kernel.selectors.voucher_selector import VoucherSelector
from ledger_kernel.services.approval_log import ApprovalLog
from ledger_kernel.services.voucher_service import VoucherService


def _input() -> VoucherInput:
    return VoucherInput.build(
        type="EXPENSE", category="RENT", payment_method="BANK", amount="900.00",
    )


def _history(voucher_id):
    with session_scope() as session:
        rows = VoucherSelector(session).history(voucher_id, ResolvedScope.all_scopes())
        return [row.action for row in rows]


class TestAtomicTransitions:

    def test_failed_history_write_leaves_voucher_pending(
        self, committed_db, cashier, admin, monkeypatch
    ):
        clock = DeterministicClock()
        with session_scope() as session:
            voucher = VoucherService(session, clock).create(cashier, _input(), resolve_scope(cashier))

        def broken_record(self, *args, **kwargs):
            raise RuntimeError("history store full")

        monkeypatch.setattr(ApprovalLog, "record", broken_record)
        with pytest.raises(RuntimeError):
            with session_scope() as session:
                VoucherService(session, clock).approve(admin, voucher.id)
        monkeypatch.undo()

        with session_scope() as session:
            stored = session.get(FinancialVoucher, voucher.id)
            assert stored.status == "PENDING"
            assert stored.approved_by is None
        assert _history(voucher.id) == ["SUBMITTED"]

    def test_failed_history_write_discards_new_voucher(
        self, committed_db, cashier, monkeypatch
    ):
        def broken_record(self, *args, **kwargs):
            raise RuntimeError("history store full")

        monkeypatch.setattr(ApprovalLog, "record", broken_record)
        with pytest.raises(RuntimeError):
            with session_scope() as session:
                VoucherService(session, DeterministicClock()).create(
                    cashier, _input(), resolve_scope(cashier),
                )
        monkeypatch.undo()

        with session_scope() as session:
            vouchers = session.execute(
                select(func.count()).select_from(FinancialVoucher)
            ).scalar_one()
            history = session.execute(
                select(func.count()).select_from(VoucherApprovalModel)
            ).scalar_one()
        assert (vouchers, history) == (0, 0)


class TestStoreUnavailable:

    def test_operational_error_is_reported_as_unavailable(self, committed_db):
        with pytest.raises(StoreUnavailableError) as exc_info:
            with session_scope():
                raise OperationalError("SELECT 1", {}, Exception("connection refused"))
        assert isinstance(exc_info.value.__cause__, OperationalError)

    def test_integrity_error_passes_through(self, committed_db):
        with pytest.raises(IntegrityError):
            with session_scope():
                raise IntegrityError("INSERT", {}, Exception("duplicate key"))
