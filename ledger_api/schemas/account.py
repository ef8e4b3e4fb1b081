from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ledger_kernel.domain.account import AccountType


class AccountCreate(BaseModel):
    account_name: str = Field(..., min_length=1)
    account_type: AccountType
    opening_balance: Optional[Decimal] = None


class AccountBalanceUpdate(BaseModel):
    current_balance: Decimal


class AccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    account_name: str
    account_type: AccountType
    scope_type: str
    scope_id: str
    current_balance: Decimal
    is_active: bool
    last_updated: datetime


class AccountListResponse(BaseModel):
    total: int
    accounts: List[AccountResponse]
