"""
Property-based tests using Hypothesis.

Properties checked:
- apply_transaction equals folding debit(bill) then credit(payment) for
  every previous balance and every non-negative bill and payment
- A statement's last running balance is the folded balance, and the fold
  equals opening + debits - credits in any order
- Money input keeps two-place amounts exactly and rejects finer ones
- Once a voucher is APPROVED or REJECTED no later approve/reject changes
  it or adds history
"""

from decimal import Decimal

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from ledger_kernel.domain.balance import (
    BalanceMovement,
    apply_transaction,
    fold,
    running_balances,
    totals,
)
from ledger_kernel.domain.ledger import parse_amount
from ledger_kernel.domain.scope import ResolvedScope, resolve_scope
from ledger_kernel.domain.voucher import (
    TERMINAL_VOUCHER_STATUSES,
    VoucherInput,
    VoucherStatus,
    check_transition,
)
from ledger_kernel.exceptions import InvalidStateError, ValidationError
from ledger_kernel.selectors.voucher_selector import VoucherSelector
from ledger_kernel.services.voucher_service import VoucherService


def money(min_value="0.00", max_value="9999999.99"):
    return st.decimals(
        min_value=Decimal(min_value),
        max_value=Decimal(max_value),
        places=2,
        allow_nan=False,
        allow_infinity=False,
    )


movements = st.one_of(
    money("0.01").map(BalanceMovement.debit),
    money("0.01").map(BalanceMovement.credit),
)


class TestBalanceProperties:

    @given(
        previous=money("-9999999.99"),
        bill=money(),
        payment=money(),
    )
    @settings(max_examples=300)
    def test_transaction_equals_fold(self, previous, bill, payment):
        folded = fold(
            [BalanceMovement.debit(bill), BalanceMovement.credit(payment)],
            opening=previous,
        )
        assert apply_transaction(previous, bill, payment) == folded
        assert folded == previous + bill - payment

    @given(previous=money("-9999999.99"), bill=money("0.01"), payment=money())
    def test_negative_amounts_rejected(self, previous, bill, payment):
        with pytest.raises(ValidationError):
            apply_transaction(previous, -bill, payment)

    @given(opening=money("-9999999.99"), history=st.lists(movements, max_size=30))
    @settings(max_examples=200)
    def test_statement_ends_at_folded_balance(self, opening, history):
        balances = running_balances(history, opening=opening)
        debits, credits = totals(history)

        assert len(balances) == len(history)
        assert fold(history, opening=opening) == opening + debits - credits
        if history:
            assert balances[-1] == fold(history, opening=opening)

    @given(history=st.lists(movements, max_size=20), data=st.data())
    def test_fold_ignores_order(self, history, data):
        shuffled = data.draw(st.permutations(history))
        assert fold(shuffled) == fold(history)


class TestMoneyInputProperties:

    @given(amount=money("-9999999.99"))
    def test_two_places_kept_exactly(self, amount):
        assert parse_amount("amount", str(amount)) == amount

    @given(
        amount=money("-9999999.99"),
        fraction=st.integers(min_value=1, max_value=9),
    )
    def test_third_place_rejected(self, amount, fraction):
        finer = amount + Decimal(fraction) / Decimal(1000)
        with pytest.raises(ValidationError):
            parse_amount("amount", finer)


class TestLifecycleProperties:

    @given(
        current=st.sampled_from(sorted(TERMINAL_VOUCHER_STATUSES)),
        target=st.sampled_from(list(VoucherStatus)),
    )
    def test_final_statuses_have_no_exit(self, current, target):
        with pytest.raises(InvalidStateError):
            check_transition("v-1", current, target)

    @given(actions=st.lists(st.sampled_from(["approve", "reject"]), min_size=1, max_size=5))
    @settings(
        max_examples=40,
        deadline=None,
        suppress_health_check=[HealthCheck.function_scoped_fixture],
    )
    def test_first_decision_is_final(self, actions, session, clock, cashier, admin):
        service = VoucherService(session, clock)
        voucher = service.create(
            cashier,
            VoucherInput.build(
                type="INCOME", category="SALES", payment_method="CASH", amount="10.00",
            ),
            resolve_scope(cashier),
        )

        outcomes = []
        for action in actions:
            try:
                if action == "approve":
                    outcomes.append(service.approve(admin, voucher.id).status)
                else:
                    outcomes.append(service.reject(admin, voucher.id, "no").status)
            except InvalidStateError as exc:
                outcomes.append(exc.current_status)

        final = "APPROVED" if actions[0] == "approve" else "REJECTED"
        assert outcomes == [final] * len(actions)
        history = VoucherSelector(session).history(voucher.id, ResolvedScope.all_scopes())
        assert [h.action for h in history] == ["SUBMITTED", final]
