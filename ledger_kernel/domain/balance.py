"""
Balance calculator (``ledger_kernel.domain.balance``).

Responsibility
--------------
The one formula that turns ledger movements into a balance.  Every read
path (balance queries, statements, per-transaction previews) goes
through ``fold`` or ``apply_transaction``; nothing else in the code base
adds up debits and credits for a subject.

Sign convention
---------------
``balance = opening + sum(debit) - sum(credit)``.  A positive balance is
money the subject owes (a customer's receivable); a negative balance is
an advance or overpayment held for the subject.

Architecture position
---------------------
**Kernel domain layer** -- pure functions.  ZERO I/O.

Invariants enforced
-------------------
* ``apply_transaction(prev, bill, payment)`` equals folding a debit of
  ``bill`` then a credit of ``payment`` onto ``prev``.  It is implemented
  as exactly that fold, so the two paths cannot drift apart.
* Folding is order-independent for the final value and
  order-dependent only for the running balances of a statement.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Protocol

from ledger_kernel.exceptions import ValidationError

ZERO = Decimal("0")


class Movement(Protocol):
    """Anything carrying a debit and a credit side (either may be None)."""

    debit_amount: Decimal | None
    credit_amount: Decimal | None


@dataclass(frozen=True)
class BalanceMovement:
    """A synthetic movement, used for previews and opening balances."""

    debit_amount: Decimal | None = None
    credit_amount: Decimal | None = None

    @classmethod
    def debit(cls, amount: Decimal) -> BalanceMovement:
        return cls(debit_amount=amount)

    @classmethod
    def credit(cls, amount: Decimal) -> BalanceMovement:
        return cls(credit_amount=amount)


def _step(balance: Decimal, movement: Movement) -> Decimal:
    if movement.debit_amount:
        balance = balance + movement.debit_amount
    if movement.credit_amount:
        balance = balance - movement.credit_amount
    return balance


def fold(movements: Iterable[Movement], opening: Decimal = ZERO) -> Decimal:
    """Balance after applying every movement to ``opening``."""
    balance = opening
    for movement in movements:
        balance = _step(balance, movement)
    return balance


def running_balances(
    movements: Iterable[Movement],
    opening: Decimal = ZERO,
) -> list[Decimal]:
    """Balance after each movement, in the order given."""
    balances: list[Decimal] = []
    balance = opening
    for movement in movements:
        balance = _step(balance, movement)
        balances.append(balance)
    return balances


def totals(movements: Iterable[Movement]) -> tuple[Decimal, Decimal]:
    """(total_debits, total_credits) over the movements."""
    debits = ZERO
    credits = ZERO
    for movement in movements:
        if movement.debit_amount:
            debits += movement.debit_amount
        if movement.credit_amount:
            credits += movement.credit_amount
    return debits, credits


def apply_transaction(
    previous_balance: Decimal,
    bill_amount: Decimal,
    payment_amount: Decimal,
) -> Decimal:
    """
    New balance after a sale of ``bill_amount`` paid with ``payment_amount``.

    ``previous_balance + bill_amount - payment_amount``

    Raises:
        ValidationError: If either amount is negative.
    """
    if bill_amount < ZERO:
        raise ValidationError("bill_amount", "must not be negative")
    if payment_amount < ZERO:
        raise ValidationError("payment_amount", "must not be negative")
    return fold(
        (BalanceMovement.debit(bill_amount), BalanceMovement.credit(payment_amount)),
        opening=previous_balance,
    )
