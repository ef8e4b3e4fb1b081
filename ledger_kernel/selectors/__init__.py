"""Read-only query layer."""

from ledger_kernel.selectors.account_selector import FinancialAccountSelector
from ledger_kernel.selectors.ledger_selector import LedgerSelector
from ledger_kernel.selectors.summary_selector import SummarySelector
from ledger_kernel.selectors.voucher_selector import VoucherSelector

__all__ = [
    "FinancialAccountSelector",
    "LedgerSelector",
    "SummarySelector",
    "VoucherSelector",
]
