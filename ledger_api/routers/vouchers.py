from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from starlette.status import HTTP_201_CREATED

from ledger_api.dependencies import (
    get_actor,
    get_clock,
    get_date_range,
    get_scope,
    get_settings,
)
from ledger_api.schemas.voucher import (
    VoucherApprove,
    VoucherCreate,
    VoucherHistoryResponse,
    VoucherListResponse,
    VoucherReject,
    VoucherResponse,
    VoucherUpdate,
)
from ledger_config import LedgerSettings
from ledger_kernel.db import session_scope
from ledger_kernel.domain.clock import Clock
from ledger_kernel.domain.ledger import DateRange
from ledger_kernel.domain.scope import ActorContext, ResolvedScope
from ledger_kernel.domain.voucher import (
    PaymentMethod,
    VoucherChanges,
    VoucherFilter,
    VoucherInput,
    VoucherStatus,
    VoucherType,
)
from ledger_kernel.selectors import VoucherSelector
from ledger_kernel.services import VoucherService

router = APIRouter()


def _voucher_service(session, clock: Clock, settings: LedgerSettings) -> VoucherService:
    return VoucherService(
        session,
        clock,
        prefixes=settings.vouchers.prefixes,
        sequence_width=settings.vouchers.sequence_width,
    )


@router.post("", response_model=VoucherResponse, status_code=HTTP_201_CREATED)
def create_voucher(
    voucher_data: VoucherCreate,
    actor: ActorContext = Depends(get_actor),
    scope: ResolvedScope = Depends(get_scope),
    clock: Clock = Depends(get_clock),
    settings: LedgerSettings = Depends(get_settings),
):
    """
    Submit a voucher in the caller's scope.
    Vouchers created by an admin are approved immediately.
    """
    data = VoucherInput.build(
        **voucher_data.model_dump(exclude={"items"}),
        items=[item.model_dump() for item in voucher_data.items],
    )
    with session_scope() as session:
        voucher = _voucher_service(session, clock, settings).create(actor, data, scope)
    return VoucherResponse.model_validate(voucher)


@router.get("", response_model=VoucherListResponse)
def list_vouchers(
    type: Optional[VoucherType] = Query(None),
    category: Optional[str] = Query(None),
    payment_method: Optional[PaymentMethod] = Query(None),
    status: Optional[VoucherStatus] = Query(None),
    user_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    scope: ResolvedScope = Depends(get_scope),
    date_range: DateRange = Depends(get_date_range),
    settings: LedgerSettings = Depends(get_settings),
):
    """ Get vouchers visible to the caller, newest first """
    filters = VoucherFilter(
        type=type,
        category=category,
        payment_method=payment_method,
        status=status,
        user_id=user_id,
        search=search,
    )
    with session_scope() as session:
        result = VoucherSelector(session).list_vouchers(
            scope,
            filters,
            date_range,
            page=page,
            limit=limit or settings.pagination.default_page_size,
            max_limit=settings.pagination.max_page_size,
        )
    return VoucherListResponse(
        items=[VoucherResponse.model_validate(v) for v in result.items],
        page=result.page,
        limit=result.limit,
        total=result.total,
        pages=result.pages,
    )


@router.get("/{voucher_id}", response_model=VoucherResponse)
def get_voucher(
    voucher_id: str,
    scope: ResolvedScope = Depends(get_scope),
):
    with session_scope() as session:
        voucher = VoucherSelector(session).get(voucher_id, scope)
    return VoucherResponse.model_validate(voucher)


@router.get("/{voucher_id}/history", response_model=List[VoucherHistoryResponse])
def get_voucher_history(
    voucher_id: str,
    scope: ResolvedScope = Depends(get_scope),
):
    """ Approval history, oldest first """
    with session_scope() as session:
        rows = VoucherSelector(session).history(voucher_id, scope)
    return [VoucherHistoryResponse.model_validate(row) for row in rows]


@router.put("/{voucher_id}", response_model=VoucherResponse)
def update_voucher(
    voucher_id: str,
    body: VoucherUpdate,
    actor: ActorContext = Depends(get_actor),
    clock: Clock = Depends(get_clock),
    settings: LedgerSettings = Depends(get_settings),
):
    """ Edit a pending voucher; approved and rejected vouchers are final """
    changes = VoucherChanges.build(**body.model_dump(exclude_unset=True))
    with session_scope() as session:
        voucher = _voucher_service(session, clock, settings).update(actor, voucher_id, changes)
    return VoucherResponse.model_validate(voucher)


@router.put("/{voucher_id}/approve", response_model=VoucherResponse)
def approve_voucher(
    voucher_id: str,
    body: Optional[VoucherApprove] = None,
    actor: ActorContext = Depends(get_actor),
    clock: Clock = Depends(get_clock),
    settings: LedgerSettings = Depends(get_settings),
):
    notes = body.notes if body else None
    with session_scope() as session:
        voucher = _voucher_service(session, clock, settings).approve(actor, voucher_id, notes)
    return VoucherResponse.model_validate(voucher)


@router.put("/{voucher_id}/reject", response_model=VoucherResponse)
def reject_voucher(
    voucher_id: str,
    body: VoucherReject,
    actor: ActorContext = Depends(get_actor),
    clock: Clock = Depends(get_clock),
    settings: LedgerSettings = Depends(get_settings),
):
    with session_scope() as session:
        voucher = _voucher_service(session, clock, settings).reject(
            actor, voucher_id, body.rejection_reason, body.notes
        )
    return VoucherResponse.model_validate(voucher)
