"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The HTTP surface maps kernel failures onto status codes, and the tests
assert on failure kinds.  Both need to catch by TYPE, never by message:

    try:
        voucher_service.approve(actor, voucher_id)
    except InvalidStateError as e:
        log.warning("voucher %s is %s", e.voucher_id, e.current_status)
        api_response(code=e.code, status=e.current_status)

Every exception carries:
  1. A CODE class attribute (machine-readable, API-safe)
  2. Structured attributes (voucher_id, field, ...) for logs and responses

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerKernelError (base)
    |
    +-- ValidationError            bad input: amounts, required fields
    |
    +-- InvalidQueryError          bad query parameter: dates, subject keys
    |
    +-- InvalidStateError          lifecycle transition not allowed
    |
    +-- ForbiddenError             actor lacks role or scope
    |
    +-- NotFoundError
    |   +-- VoucherNotFoundError
    |   +-- FinancialAccountNotFoundError
    |
    +-- StoreUnavailableError      backing store unreachable
    |
    +-- ImmutabilityViolationError append-only record was modified

Failures leave no partial state: services flush inside the caller's
transaction, and session_scope() rolls the whole unit back on any of these.
"""

from typing import Any


class LedgerKernelError(Exception):
    """Base exception for all ledger kernel errors."""

    code: str = "LEDGER_KERNEL_ERROR"

    def to_details(self) -> dict[str, Any]:
        """Structured attributes for API error bodies."""
        return {
            key: value
            for key, value in vars(self).items()
            if not key.startswith("_")
        }


class ValidationError(LedgerKernelError):
    """Input rejected before anything was written."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class InvalidQueryError(LedgerKernelError):
    """
    Query parameter could not be interpreted.

    Raised for malformed dates, inverted date ranges, bad subject keys
    and out-of-range pagination.
    """

    code: str = "INVALID_QUERY"

    def __init__(self, parameter: str, value: Any, reason: str):
        self.parameter = parameter
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid query parameter {parameter}={value!r}: {reason}")


class InvalidStateError(LedgerKernelError):
    """Voucher is not in a state that permits the requested transition."""

    code: str = "INVALID_STATE"

    def __init__(self, voucher_id: str, current_status: str, attempted_status: str):
        self.voucher_id = voucher_id
        self.current_status = current_status
        self.attempted_status = attempted_status
        super().__init__(
            f"Voucher {voucher_id} is {current_status}; "
            f"cannot transition to {attempted_status}"
        )


class ForbiddenError(LedgerKernelError):
    """Actor's role or scope does not permit the operation."""

    code: str = "FORBIDDEN"

    def __init__(self, action: str, role: str | None, reason: str):
        self.action = action
        self.role = role
        self.reason = reason
        super().__init__(f"Forbidden: {action} ({reason})")


class NotFoundError(LedgerKernelError):
    """Referenced record does not exist or is outside the caller's scope."""

    code: str = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} not found: {entity_id}")


class VoucherNotFoundError(NotFoundError):
    """Voucher id does not resolve."""

    code: str = "VOUCHER_NOT_FOUND"

    def __init__(self, voucher_id: str):
        super().__init__("FinancialVoucher", voucher_id)
        self.voucher_id = voucher_id


class FinancialAccountNotFoundError(NotFoundError):
    """Financial account id does not resolve."""

    code: str = "FINANCIAL_ACCOUNT_NOT_FOUND"

    def __init__(self, account_id: str):
        super().__init__("FinancialAccount", account_id)
        self.account_id = account_id


class StoreUnavailableError(LedgerKernelError):
    """
    The backing store could not be reached or refused the connection.

    Retryable: nothing was committed.
    """

    code: str = "STORE_UNAVAILABLE"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Ledger store unavailable: {reason}")


class ImmutabilityViolationError(LedgerKernelError):
    """
    Attempted to modify or delete an append-only record.

    Ledger entries and voucher approval rows are never updated or
    deleted once written.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
