"""Financial account value objects (``ledger_kernel.domain.account``)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from ledger_kernel.exceptions import ValidationError


class AccountType(str, Enum):
    CASH = "CASH"
    BANK = "BANK"
    MOBILE = "MOBILE"
    CARD = "CARD"
    OTHER = "OTHER"


def parse_account_type(value) -> AccountType:
    """
    Raises:
        ValidationError: Missing or unknown account type.
    """
    if value is None or value == "":
        raise ValidationError("account_type", "is required")
    try:
        return AccountType(str(getattr(value, "value", value)).upper())
    except ValueError:
        raise ValidationError(
            "account_type", f"must be one of {[t.value for t in AccountType]}"
        ) from None


@dataclass(frozen=True)
class FinancialAccountRecord:
    id: UUID
    account_name: str
    account_type: str
    scope_type: str
    scope_id: str
    current_balance: Decimal
    is_active: bool
    last_updated: datetime
