"""
FinancialAccountService -- admin-managed balance buckets per branch/warehouse.

current_balance is never derived from vouchers or ledger entries; it only
changes through an explicit set_balance call.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from ledger_kernel.db.types import round_money
from ledger_kernel.domain.account import FinancialAccountRecord, parse_account_type
from ledger_kernel.domain.ledger import parse_amount
from ledger_kernel.domain.scope import ActorContext, ResolvedScope, require_admin
from ledger_kernel.exceptions import FinancialAccountNotFoundError, ValidationError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.financial_account import FinancialAccount
from ledger_kernel.services.base import BaseService

logger = get_logger("services.financial_account")


class FinancialAccountService(BaseService):
    def create_account(
        self,
        actor: ActorContext,
        scope: ResolvedScope,
        account_name: str,
        account_type: str,
        opening_balance: Decimal | str | None = None,
    ) -> FinancialAccountRecord:
        """
        Raises:
            ForbiddenError: Actor is not ADMIN.
            ValidationError: Missing name, unknown type, scope not concrete,
                or an account with this name already exists in the scope.
        """
        require_admin(actor, "create_financial_account")
        name = (account_name or "").strip()
        if not name:
            raise ValidationError("account_name", "is required")
        kind = parse_account_type(account_type)
        scope_type, scope_id = scope.require_concrete()
        balance = parse_amount("opening_balance", opening_balance) or Decimal("0")

        account = FinancialAccount(
            account_name=name,
            account_type=kind.value,
            scope_type=scope_type.value,
            scope_id=scope_id,
            current_balance=round_money(balance),
            is_active=True,
            last_updated=self._clock.now(),
        )
        savepoint = self.session.begin_nested()
        try:
            self.session.add(account)
            self.session.flush()
            savepoint.commit()
        except IntegrityError:
            savepoint.rollback()
            raise ValidationError(
                "account_name", f"{name!r} already exists in {scope_type.value}:{scope_id}"
            ) from None

        logger.info(
            "financial_account_created",
            extra={
                "account_id": str(account.id),
                "account_name": name,
                "account_type": kind.value,
                "account_scope": f"{scope_type.value}:{scope_id}",
            },
        )
        return account.to_dto()

    def set_balance(
        self,
        actor: ActorContext,
        account_id: UUID | str,
        new_balance: Decimal | str,
    ) -> FinancialAccountRecord:
        """
        Overwrite an account's current balance.

        Raises:
            ForbiddenError: Actor is not ADMIN.
            ValidationError: Balance missing or not a number.
            FinancialAccountNotFoundError: Unknown account.
        """
        require_admin(actor, "set_financial_account_balance")
        balance = parse_amount("current_balance", new_balance)
        if balance is None:
            raise ValidationError("current_balance", "is required")
        try:
            aid = account_id if isinstance(account_id, UUID) else UUID(str(account_id))
        except ValueError:
            raise FinancialAccountNotFoundError(str(account_id)) from None

        account = self.session.get(FinancialAccount, aid, with_for_update=True)
        if account is None:
            raise FinancialAccountNotFoundError(str(account_id))

        previous = account.current_balance
        account.current_balance = round_money(balance)
        account.last_updated = self._clock.now()
        self.session.flush()

        logger.info(
            "financial_account_balance_set",
            extra={
                "account_id": str(aid),
                "previous_balance": previous,
                "new_balance": account.current_balance,
                "actor_id": actor.user_id,
            },
        )
        return account.to_dto()
