"""ORM models for the ledger kernel."""

from ledger_kernel.models.financial_account import FinancialAccount
from ledger_kernel.models.ledger_entry import LedgerEntry
from ledger_kernel.models.sequence import LedgerSubjectCounter, VoucherNumberCounter
from ledger_kernel.models.voucher import (
    FinancialVoucher,
    VoucherApprovalModel,
    VoucherItemModel,
)

__all__ = [
    "FinancialAccount",
    "FinancialVoucher",
    "LedgerEntry",
    "LedgerSubjectCounter",
    "VoucherApprovalModel",
    "VoucherItemModel",
    "VoucherNumberCounter",
]
