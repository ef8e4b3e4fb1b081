"""
Module: ledger_kernel.selectors.account_selector
Responsibility: Scoped reads of financial accounts.
"""

from uuid import UUID

from sqlalchemy import select

from ledger_kernel.domain.account import FinancialAccountRecord
from ledger_kernel.domain.scope import ResolvedScope, apply_scope
from ledger_kernel.exceptions import FinancialAccountNotFoundError
from ledger_kernel.models.financial_account import FinancialAccount
from ledger_kernel.selectors.base import BaseSelector


class FinancialAccountSelector(BaseSelector):
    def list_accounts(
        self,
        scope: ResolvedScope,
        include_inactive: bool = False,
    ) -> list[FinancialAccountRecord]:
        """Accounts visible in the scope, ordered by scope then name."""
        stmt = apply_scope(
            select(FinancialAccount),
            scope,
            FinancialAccount.scope_type,
            FinancialAccount.scope_id,
        )
        if not include_inactive:
            stmt = stmt.where(FinancialAccount.is_active.is_(True))
        stmt = stmt.order_by(
            FinancialAccount.scope_type,
            FinancialAccount.scope_id,
            FinancialAccount.account_name,
        )
        return [row.to_dto() for row in self.session.execute(stmt).scalars()]

    def get(self, account_id: UUID | str, scope: ResolvedScope) -> FinancialAccountRecord:
        """
        Raises:
            FinancialAccountNotFoundError: Unknown id or outside the scope.
        """
        try:
            aid = account_id if isinstance(account_id, UUID) else UUID(str(account_id))
        except ValueError:
            raise FinancialAccountNotFoundError(str(account_id)) from None
        row = self.session.get(FinancialAccount, aid)
        if row is None or not scope.includes(row.scope_type, row.scope_id):
            raise FinancialAccountNotFoundError(str(account_id))
        return row.to_dto()
