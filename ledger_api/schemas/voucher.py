from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ledger_kernel.domain.voucher import PaymentMethod, VoucherStatus, VoucherType


class VoucherItemCreate(BaseModel):
    name: str
    quantity: Decimal = Decimal("1")
    unit_price: Decimal


class VoucherCreate(BaseModel):
    type: VoucherType
    category: str = Field(..., min_length=1)
    payment_method: PaymentMethod
    amount: Decimal
    description: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    items: List[VoucherItemCreate] = []


class VoucherUpdate(BaseModel):
    category: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    amount: Optional[Decimal] = None
    description: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None


class VoucherApprove(BaseModel):
    notes: Optional[str] = None


class VoucherReject(BaseModel):
    rejection_reason: Optional[str] = None
    notes: Optional[str] = None


class VoucherItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    quantity: Decimal
    unit_price: Decimal
    line_total: Decimal


class VoucherResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    voucher_no: str
    type: VoucherType
    category: str
    payment_method: PaymentMethod
    amount: Decimal
    description: Optional[str] = None
    reference: Optional[str] = None
    scope_type: str
    scope_id: str
    user_id: str
    user_name: Optional[str] = None
    user_role: str
    status: VoucherStatus
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    items: List[VoucherItemResponse] = []


class VoucherListResponse(BaseModel):
    items: List[VoucherResponse]
    page: int
    limit: int
    total: int
    pages: int


class VoucherHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    voucher_id: UUID
    action: str
    performed_by: str
    performed_by_name: Optional[str] = None
    performed_by_role: Optional[str] = None
    comments: Optional[str] = None
    created_at: datetime
