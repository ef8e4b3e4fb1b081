from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class _IncomeTotals(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_income: Decimal
    total_expense: Decimal
    total_transfer: Decimal
    net: Decimal
    transaction_count: int


class DailySummaryResponse(_IncomeTotals):
    day: date


class PaymentMethodSummaryResponse(_IncomeTotals):
    payment_method: str


class ScopeSummaryResponse(_IncomeTotals):
    scope_type: str
    scope_id: str


class FinancialSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: str
    category: str
    payment_method: str
    scope_type: str
    scope_id: str
    total_amount: Decimal
    transaction_count: int


class StatusSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: str
    total_amount: Decimal
    transaction_count: int


class LedgerDailyTotalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    day: date
    total_debits: Decimal
    total_credits: Decimal
    net: Decimal
    entry_count: int
