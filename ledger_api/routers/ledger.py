from fastapi import APIRouter, Depends
from starlette.status import HTTP_201_CREATED

from ledger_api.dependencies import get_actor, get_clock, get_date_range, get_scope
from ledger_api.schemas.ledger import (
    BalanceResponse,
    LedgerEntryCreate,
    LedgerEntryResponse,
    LedgerTransactionCreate,
    StatementResponse,
    TransactionResponse,
)
from ledger_kernel.db import session_scope
from ledger_kernel.domain.clock import Clock
from ledger_kernel.domain.ledger import DateRange, LedgerEntryInput, SubjectRef
from ledger_kernel.domain.scope import ActorContext, ResolvedScope
from ledger_kernel.selectors import LedgerSelector
from ledger_kernel.services import LedgerEntryService

router = APIRouter()


@router.get("/balance/{subject_key}", response_model=BalanceResponse)
def get_balance(
    subject_key: str,
    scope: ResolvedScope = Depends(get_scope),
    date_range: DateRange = Depends(get_date_range),
):
    """
    Debit and credit totals for a subject such as ``CUSTOMER:42``.
    balance is debits minus credits; negative means the business owes the subject.
    """
    subject = SubjectRef.parse(subject_key)
    with session_scope() as session:
        result = LedgerSelector(session).balance(subject, scope, date_range)
    return BalanceResponse.model_validate(result)


@router.post("/entries", response_model=LedgerEntryResponse, status_code=HTTP_201_CREATED)
def create_entry(
    entry_data: LedgerEntryCreate,
    actor: ActorContext = Depends(get_actor),
    scope: ResolvedScope = Depends(get_scope),
    clock: Clock = Depends(get_clock),
):
    entry = LedgerEntryInput(
        subject=SubjectRef.of(entry_data.subject_type, entry_data.subject_id),
        entry_type=entry_data.entry_type,
        debit_amount=entry_data.debit_amount,
        credit_amount=entry_data.credit_amount,
        description=entry_data.description,
        reference_type=entry_data.reference_type,
        reference_id=entry_data.reference_id,
    )
    with session_scope() as session:
        record = LedgerEntryService(session, clock).append(entry, scope, actor.user_id)
    return LedgerEntryResponse.model_validate(record)


@router.post("/transactions", response_model=TransactionResponse, status_code=HTTP_201_CREATED)
def create_transaction(
    transaction_data: LedgerTransactionCreate,
    actor: ActorContext = Depends(get_actor),
    scope: ResolvedScope = Depends(get_scope),
    clock: Clock = Depends(get_clock),
):
    """ Record a bill and its payment, returning the balance before and after """
    subject = SubjectRef.of(transaction_data.subject_type, transaction_data.subject_id)
    with session_scope() as session:
        result = LedgerEntryService(session, clock).record_transaction(
            subject,
            transaction_data.bill_amount,
            transaction_data.payment_amount,
            scope,
            actor.user_id,
            description=transaction_data.description,
            reference_type=transaction_data.reference_type,
            reference_id=transaction_data.reference_id,
        )
    return TransactionResponse.model_validate(result)


@router.get("/entries/{subject_key}", response_model=StatementResponse)
def get_statement(
    subject_key: str,
    scope: ResolvedScope = Depends(get_scope),
    date_range: DateRange = Depends(get_date_range),
):
    """ Ledger statement with the running balance after every entry """
    subject = SubjectRef.parse(subject_key)
    with session_scope() as session:
        statement = LedgerSelector(session).statement(subject, scope, date_range)
    return StatementResponse.model_validate(statement)
