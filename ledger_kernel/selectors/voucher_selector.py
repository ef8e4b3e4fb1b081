"""
Module: ledger_kernel.selectors.voucher_selector
Responsibility: Scoped voucher reads: single fetch, filtered paginated list
    and approval history.

Architecture position: Kernel > Selectors.

A voucher outside the caller's scope is reported exactly like a missing
one (VoucherNotFoundError), so scope membership does not leak.
"""

from uuid import UUID

from sqlalchemy import func, or_, select

from ledger_kernel.domain.ledger import DateRange
from ledger_kernel.domain.scope import ResolvedScope
from ledger_kernel.domain.voucher import (
    Voucher,
    VoucherApprovalRecord,
    VoucherFilter,
    VoucherPage,
    coerce_voucher_id,
)
from ledger_kernel.exceptions import InvalidQueryError, VoucherNotFoundError
from ledger_kernel.models.voucher import FinancialVoucher, VoucherApprovalModel
from ledger_kernel.selectors.base import BaseSelector

MAX_PAGE_SIZE = 100


class VoucherSelector(BaseSelector):
    def _load(self, voucher_id: UUID | str, scope: ResolvedScope) -> FinancialVoucher:
        vid = coerce_voucher_id(voucher_id)
        row = self.session.get(FinancialVoucher, vid)
        if row is None or not scope.includes(row.scope_type, row.scope_id):
            raise VoucherNotFoundError(str(vid))
        return row

    def get(self, voucher_id: UUID | str, scope: ResolvedScope) -> Voucher:
        """
        Raises:
            VoucherNotFoundError: Unknown id, or voucher outside the scope.
        """
        return self._load(voucher_id, scope).to_dto()

    def history(
        self,
        voucher_id: UUID | str,
        scope: ResolvedScope,
    ) -> list[VoucherApprovalRecord]:
        """Approval history rows for a visible voucher, oldest first."""
        voucher = self._load(voucher_id, scope)
        rows = self.session.execute(
            select(VoucherApprovalModel)
            .where(VoucherApprovalModel.voucher_id == voucher.id)
            .order_by(VoucherApprovalModel.created_at, VoucherApprovalModel.seq)
        ).scalars()
        return [row.to_dto() for row in rows]

    def list_vouchers(
        self,
        scope: ResolvedScope,
        filters: VoucherFilter | None = None,
        date_range: DateRange | None = None,
        page: int = 1,
        limit: int = 20,
        max_limit: int = MAX_PAGE_SIZE,
    ) -> VoucherPage:
        """
        Newest-first page of vouchers matching every given filter.

        Raises:
            InvalidQueryError: page < 1, or limit outside 1..max_limit.
        """
        if page < 1:
            raise InvalidQueryError("page", page, "must be >= 1")
        if limit < 1 or limit > max_limit:
            raise InvalidQueryError("limit", limit, f"must be between 1 and {max_limit}")

        conditions = scope.predicates(FinancialVoucher.scope_type, FinancialVoucher.scope_id)
        conditions.extend(self._filter_conditions(filters or VoucherFilter()))
        if date_range is not None:
            conditions.extend(date_range.predicates(FinancialVoucher.created_at))

        total = self.session.execute(
            select(func.count()).select_from(FinancialVoucher).where(*conditions)
        ).scalar_one()

        rows = self.session.execute(
            select(FinancialVoucher)
            .where(*conditions)
            .order_by(FinancialVoucher.created_at.desc(), FinancialVoucher.voucher_no.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars()

        return VoucherPage(
            items=tuple(row.to_dto() for row in rows),
            page=page,
            limit=limit,
            total=total,
        )

    @staticmethod
    def _filter_conditions(filters: VoucherFilter) -> list:
        conditions = []
        if filters.type is not None:
            conditions.append(FinancialVoucher.type == filters.type.value)
        if filters.category:
            conditions.append(FinancialVoucher.category == filters.category.upper())
        if filters.payment_method is not None:
            conditions.append(FinancialVoucher.payment_method == filters.payment_method.value)
        if filters.status is not None:
            conditions.append(FinancialVoucher.status == filters.status.value)
        if filters.user_id:
            conditions.append(FinancialVoucher.user_id == filters.user_id)
        if filters.search:
            pattern = f"%{filters.search.strip().lower()}%"
            conditions.append(
                or_(
                    func.lower(FinancialVoucher.voucher_no).like(pattern),
                    func.lower(FinancialVoucher.description).like(pattern),
                    func.lower(FinancialVoucher.reference).like(pattern),
                    func.lower(FinancialVoucher.user_name).like(pattern),
                )
            )
        return conditions
