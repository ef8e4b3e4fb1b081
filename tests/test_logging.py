"""Tests for the JSON log lines written by ledger_kernel/logging_config.py."""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from ledger_kernel.domain.voucher import VoucherStatus
from ledger_kernel.exceptions import InvalidStateError
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture
def lines():
    """Configure logging into a buffer; call the fixture to read parsed lines."""
    reset_logging()
    LogContext.clear()
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    configure_logging(handler=handler)

    def _read() -> list[dict]:
        return [json.loads(line) for line in stream.getvalue().splitlines() if line]

    yield _read
    LogContext.clear()
    reset_logging()


class TestStructuredFormatter:

    def test_one_json_object_per_record(self, lines):
        get_logger("services.voucher").info("voucher_created", extra={"voucher_no": "INC202401010001"})

        (record,) = lines()
        assert record["level"] == "INFO"
        assert record["logger"] == "ledger_kernel.services.voucher"
        assert record["message"] == "voucher_created"
        assert record["voucher_no"] == "INC202401010001"
        assert "ts" in record

    def test_money_ids_dates_and_enums(self, lines):
        entry_id = uuid4()
        get_logger("test").info(
            "mixed",
            extra={
                "entry_id": entry_id,
                "amount": Decimal("150.50"),
                "on_date": date(2024, 1, 1),
                "status": VoucherStatus.PENDING,
            },
        )

        (record,) = lines()
        assert record["entry_id"] == str(entry_id)
        assert record["amount"] == "150.50"
        assert record["on_date"] == "2024-01-01"
        assert record["status"] == "PENDING"

    def test_kernel_exception_attributes(self, lines):
        try:
            raise InvalidStateError("v-1", "APPROVED", "REJECTED")
        except InvalidStateError:
            get_logger("test").warning("voucher_transition_lost", exc_info=True)

        (record,) = lines()
        assert record["exc_type"] == "InvalidStateError"
        assert record["exc_code"] == "INVALID_STATE"
        assert record["exc_current_status"] == "APPROVED"
        assert "traceback" in record

    def test_debug_hidden_at_default_level(self, lines):
        logger = get_logger("test")
        logger.debug("transaction_started")
        logger.info("transaction_committed")
        assert [r["message"] for r in lines()] == ["transaction_committed"]

    def test_formatter_usable_on_its_own(self):
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(StructuredFormatter())
        logger = logging.getLogger("standalone.ledger")
        logger.addHandler(handler)
        try:
            logger.warning("plain")
        finally:
            logger.removeHandler(handler)
        assert json.loads(stream.getvalue())["message"] == "plain"


class TestLogContext:

    def test_bound_fields_appear_on_records(self, lines):
        with LogContext.bind(voucher_id="v-9", actor_id="u-admin"):
            get_logger("test").info("voucher_approved")
        get_logger("test").info("after")

        inside, after = lines()
        assert inside["voucher_id"] == "v-9"
        assert inside["actor_id"] == "u-admin"
        assert "voucher_id" not in after

    def test_nested_bind_restores_outer_value(self, lines):
        with LogContext.bind(subject_key="CUSTOMER:1"):
            with LogContext.bind(subject_key="CUSTOMER:2", scope="BRANCH:1"):
                assert LogContext.get_all() == {"subject_key": "CUSTOMER:2", "scope": "BRANCH:1"}
            assert LogContext.get_all() == {"subject_key": "CUSTOMER:1"}
        assert LogContext.get_all() == {}

    def test_none_and_unknown_fields_ignored(self, lines):
        with LogContext.bind(voucher_id=None, shoe_size="9"):
            assert LogContext.get_all() == {}


class TestConfigureLogging:

    def test_second_call_keeps_first_handler(self, lines):
        extra = logging.StreamHandler(StringIO())
        configure_logging(handler=extra)
        assert extra not in logging.getLogger("ledger_kernel").handlers

    def test_level_by_name(self):
        reset_logging()
        stream = StringIO()
        configure_logging(handler=logging.StreamHandler(stream), level="DEBUG")
        try:
            get_logger("deep.nested").debug("visible")
        finally:
            reset_logging()
        assert json.loads(stream.getvalue())["logger"] == "ledger_kernel.deep.nested"
