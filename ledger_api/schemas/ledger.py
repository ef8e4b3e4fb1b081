from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from ledger_kernel.domain.ledger import EntryType, SubjectType


class LedgerEntryCreate(BaseModel):
    subject_type: SubjectType
    subject_id: str
    entry_type: EntryType
    debit_amount: Optional[Decimal] = None
    credit_amount: Optional[Decimal] = None
    description: Optional[str] = None
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None


class LedgerTransactionCreate(BaseModel):
    """A bill and the payment received against it."""

    subject_type: SubjectType
    subject_id: str
    bill_amount: Decimal = Decimal("0")
    payment_amount: Decimal = Decimal("0")
    description: Optional[str] = None
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None


class LedgerEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    seq: int
    subject_type: Optional[str] = None
    subject_id: Optional[str] = None
    subject_key: Optional[str] = None
    entry_type: str
    debit_amount: Optional[Decimal] = None
    credit_amount: Optional[Decimal] = None
    description: Optional[str] = None
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    scope_type: Optional[str] = None
    scope_id: Optional[str] = None
    performed_by: str
    created_at: datetime


class BalanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    subject_key: str
    total_debits: Decimal
    total_credits: Decimal
    balance: Decimal
    entry_count: int


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    subject_key: str
    previous_balance: Decimal
    new_balance: Decimal
    entries: List[LedgerEntryResponse]


class StatementLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    entry: LedgerEntryResponse
    running_balance: Decimal


class StatementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    subject_key: str
    opening_balance: Decimal
    lines: List[StatementLineResponse]
    closing_balance: Decimal
