"""Write-side services. Each flushes into the caller's transaction."""

from ledger_kernel.services.approval_log import ApprovalLog
from ledger_kernel.services.financial_account_service import FinancialAccountService
from ledger_kernel.services.ledger_entry_service import LedgerEntryService
from ledger_kernel.services.migration import backfill_subject_from_description
from ledger_kernel.services.sequence_service import SequenceService
from ledger_kernel.services.voucher_number_service import VoucherNumberService
from ledger_kernel.services.voucher_service import VoucherService

__all__ = [
    "ApprovalLog",
    "FinancialAccountService",
    "LedgerEntryService",
    "SequenceService",
    "VoucherNumberService",
    "VoucherService",
    "backfill_subject_from_description",
]
