from typing import List

from fastapi import APIRouter, Depends

from ledger_api.dependencies import get_date_range, get_scope
from ledger_api.schemas.report import (
    DailySummaryResponse,
    FinancialSummaryResponse,
    LedgerDailyTotalResponse,
    PaymentMethodSummaryResponse,
    ScopeSummaryResponse,
    StatusSummaryResponse,
)
from ledger_kernel.db import session_scope
from ledger_kernel.domain.ledger import DateRange
from ledger_kernel.domain.scope import ResolvedScope
from ledger_kernel.selectors import SummarySelector

router = APIRouter()


@router.get("/daily-summary", response_model=List[DailySummaryResponse])
def daily_summary(
    scope: ResolvedScope = Depends(get_scope),
    date_range: DateRange = Depends(get_date_range),
):
    """ Approved income, expense and transfer totals per day """
    with session_scope() as session:
        rows = SummarySelector(session).daily_summary(scope, date_range)
    return [DailySummaryResponse.model_validate(row) for row in rows]


@router.get("/payment-method-summary", response_model=List[PaymentMethodSummaryResponse])
def payment_method_summary(
    scope: ResolvedScope = Depends(get_scope),
    date_range: DateRange = Depends(get_date_range),
):
    with session_scope() as session:
        rows = SummarySelector(session).payment_method_summary(scope, date_range)
    return [PaymentMethodSummaryResponse.model_validate(row) for row in rows]


@router.get("/scope-summary", response_model=List[ScopeSummaryResponse])
def scope_summary(
    scope: ResolvedScope = Depends(get_scope),
    date_range: DateRange = Depends(get_date_range),
):
    with session_scope() as session:
        rows = SummarySelector(session).scope_summary(scope, date_range)
    return [ScopeSummaryResponse.model_validate(row) for row in rows]


@router.get("/status-summary", response_model=List[StatusSummaryResponse])
def status_summary(
    scope: ResolvedScope = Depends(get_scope),
    date_range: DateRange = Depends(get_date_range),
):
    """ Count and amount per status, including pending and rejected """
    with session_scope() as session:
        rows = SummarySelector(session).status_summary(scope, date_range)
    return [StatusSummaryResponse.model_validate(row) for row in rows]


@router.get("/summary", response_model=List[FinancialSummaryResponse])
def financial_summary(
    scope: ResolvedScope = Depends(get_scope),
    date_range: DateRange = Depends(get_date_range),
):
    with session_scope() as session:
        rows = SummarySelector(session).financial_summary(scope, date_range)
    return [FinancialSummaryResponse.model_validate(row) for row in rows]


@router.get("/ledger-daily-totals", response_model=List[LedgerDailyTotalResponse])
def ledger_daily_totals(
    scope: ResolvedScope = Depends(get_scope),
    date_range: DateRange = Depends(get_date_range),
):
    with session_scope() as session:
        rows = SummarySelector(session).ledger_daily_totals(scope, date_range)
    return [LedgerDailyTotalResponse.model_validate(row) for row in rows]
