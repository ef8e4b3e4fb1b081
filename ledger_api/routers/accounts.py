from fastapi import APIRouter, Depends, Query
from starlette.status import HTTP_201_CREATED

from ledger_api.dependencies import get_actor, get_clock, get_scope
from ledger_api.schemas.account import (
    AccountBalanceUpdate,
    AccountCreate,
    AccountListResponse,
    AccountResponse,
)
from ledger_kernel.db import session_scope
from ledger_kernel.domain.clock import Clock
from ledger_kernel.domain.scope import ActorContext, ResolvedScope
from ledger_kernel.selectors import FinancialAccountSelector
from ledger_kernel.services import FinancialAccountService

router = APIRouter()


@router.get("", response_model=AccountListResponse)
def get_accounts(
    include_inactive: bool = Query(False),
    scope: ResolvedScope = Depends(get_scope),
):
    """ Get the financial accounts visible to the caller """
    with session_scope() as session:
        accounts = FinancialAccountSelector(session).list_accounts(scope, include_inactive)
    return AccountListResponse(
        total=len(accounts),
        accounts=[AccountResponse.model_validate(account) for account in accounts],
    )


@router.post("", response_model=AccountResponse, status_code=HTTP_201_CREATED)
def create_account(
    account_data: AccountCreate,
    actor: ActorContext = Depends(get_actor),
    scope: ResolvedScope = Depends(get_scope),
    clock: Clock = Depends(get_clock),
):
    with session_scope() as session:
        account = FinancialAccountService(session, clock).create_account(
            actor,
            scope,
            account_data.account_name,
            account_data.account_type,
            account_data.opening_balance,
        )
    return AccountResponse.model_validate(account)


@router.put("/{account_id}/balance", response_model=AccountResponse)
def set_account_balance(
    account_id: str,
    balance_data: AccountBalanceUpdate,
    actor: ActorContext = Depends(get_actor),
    clock: Clock = Depends(get_clock),
):
    """ Overwrite an account's current balance (admin only) """
    with session_scope() as session:
        account = FinancialAccountService(session, clock).set_balance(
            actor, account_id, balance_data.current_balance
        )
    return AccountResponse.model_validate(account)
