"""
Tests for the voucher state machine and voucher input validation.
"""

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.voucher import (
    TERMINAL_VOUCHER_STATUSES,
    VOUCHER_TRANSITIONS,
    PaymentMethod,
    VoucherChanges,
    VoucherInput,
    VoucherPage,
    VoucherStatus,
    VoucherType,
    check_transition,
    coerce_voucher_id,
    format_voucher_no,
)
from ledger_kernel.exceptions import (
    InvalidStateError,
    ValidationError,
    VoucherNotFoundError,
)


class TestTransitions:

    def test_pending_can_be_approved_or_rejected(self):
        check_transition("v1", VoucherStatus.PENDING, VoucherStatus.APPROVED)
        check_transition("v1", "PENDING", VoucherStatus.REJECTED)

    @pytest.mark.parametrize("current", [VoucherStatus.APPROVED, VoucherStatus.REJECTED])
    @pytest.mark.parametrize("target", list(VoucherStatus))
    def test_terminal_states_have_no_exit(self, current, target):
        with pytest.raises(InvalidStateError) as exc_info:
            check_transition("v1", current, target)
        assert exc_info.value.current_status == current.value
        assert exc_info.value.attempted_status == target.value

    def test_terminal_set_derived_from_table(self):
        assert TERMINAL_VOUCHER_STATUSES == {VoucherStatus.APPROVED, VoucherStatus.REJECTED}
        assert set(VOUCHER_TRANSITIONS) == set(VoucherStatus)


class TestVoucherNumbers:

    def test_format(self):
        assert format_voucher_no("INC", date(2024, 1, 1), 1, 4) == "INC202401010001"
        assert format_voucher_no("TRF", date(2024, 12, 31), 12345, 4) == "TRF2024123112345"

    def test_malformed_id_is_not_found(self):
        with pytest.raises(VoucherNotFoundError):
            coerce_voucher_id("not-a-uuid")


class TestVoucherInput:

    def _build(self, **overrides):
        fields = dict(
            type="income",
            category="sales",
            payment_method="cash",
            amount="150.00",
        )
        fields.update(overrides)
        return VoucherInput.build(**fields)

    def test_normalizes_enums_and_category(self):
        data = self._build()
        assert data.type is VoucherType.INCOME
        assert data.payment_method is PaymentMethod.CASH
        assert data.category == "SALES"
        assert data.amount == Decimal("150.00")

    @pytest.mark.parametrize("amount", ["0", "-1", None, ""])
    def test_amount_must_be_positive(self, amount):
        with pytest.raises(ValidationError) as exc_info:
            self._build(amount=amount)
        assert exc_info.value.field == "amount"

    @pytest.mark.parametrize("field", ["type", "category", "payment_method"])
    def test_required_fields(self, field):
        with pytest.raises(ValidationError) as exc_info:
            self._build(**{field: None})
        assert exc_info.value.field == field

    def test_unknown_payment_method(self):
        with pytest.raises(ValidationError):
            self._build(payment_method="CHEQUE")

    def test_item_line_total(self):
        data = self._build(items=[{"name": "Rice 5kg", "quantity": "3", "unit_price": "12.50"}])
        assert data.items[0].line_total == Decimal("37.50")

    def test_item_quantity_defaults_to_one(self):
        data = self._build(items=[{"name": "Delivery", "unit_price": "200"}])
        assert data.items[0].quantity == Decimal("1")

    def test_item_without_name_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            self._build(items=[{"name": " ", "unit_price": "1"}])
        assert exc_info.value.field == "items[0].name"


class TestVoucherChanges:

    def test_only_given_fields_change(self):
        changes = VoucherChanges.build(category=" rent ", amount="75.50")
        assert changes.as_values() == {"category": "RENT", "amount": Decimal("75.50")}

    def test_payment_method_normalized(self):
        assert VoucherChanges.build(payment_method="bank").payment_method is PaymentMethod.BANK

    def test_empty_change_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            VoucherChanges.build()
        assert exc_info.value.field == "voucher"

    @pytest.mark.parametrize("amount", ["0", "-1", "0.001"])
    def test_bad_amount_rejected(self, amount):
        with pytest.raises(ValidationError) as exc_info:
            VoucherChanges.build(amount=amount)
        assert exc_info.value.field == "amount"

    def test_blank_category_rejected(self):
        with pytest.raises(ValidationError):
            VoucherChanges.build(category="  ")


class TestVoucherPage:

    @pytest.mark.parametrize("total, limit, pages", [(0, 20, 0), (1, 20, 1), (40, 20, 2), (41, 20, 3)])
    def test_pages(self, total, limit, pages):
        assert VoucherPage(items=(), page=1, limit=limit, total=total).pages == pages
