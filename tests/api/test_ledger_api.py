"""HTTP tests for /api/v1/ledger."""

from decimal import Decimal


def _entry(client, headers, **overrides):
    body = {
        "subject_type": "CUSTOMER",
        "subject_id": "42",
        "entry_type": "SALE",
        "debit_amount": "1000",
    }
    body.update(overrides)
    return client.post("/api/v1/ledger/entries", json=body, headers=headers)


class TestEntries:

    def test_append_entry(self, client, as_cashier):
        response = _entry(client, as_cashier)

        assert response.status_code == 201
        data = response.json()
        assert data["subject_key"] == "CUSTOMER:42"
        assert data["scope_id"] == "1"
        assert data["performed_by"] == "u-cashier-1"
        assert data["credit_amount"] is None
        assert Decimal(data["debit_amount"]) == Decimal("1000")

    def test_both_sides_rejected(self, client, as_cashier):
        response = _entry(client, as_cashier, credit_amount="10")
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_unknown_entry_type(self, client, as_cashier):
        response = _entry(client, as_cashier, entry_type="REFUND")
        assert response.status_code == 400


class TestBalance:

    def test_money_serialized_as_strings(self, client, as_cashier):
        _entry(client, as_cashier)
        _entry(client, as_cashier, entry_type="PAYMENT", debit_amount=None, credit_amount="400")

        data = client.get("/api/v1/ledger/balance/CUSTOMER:42", headers=as_cashier).json()

        assert isinstance(data["balance"], str)
        assert Decimal(data["total_debits"]) == Decimal("1000")
        assert Decimal(data["total_credits"]) == Decimal("400")
        assert Decimal(data["balance"]) == Decimal("600")
        assert data["entry_count"] == 2

    def test_unknown_subject_has_zero_balance(self, client, as_cashier):
        data = client.get("/api/v1/ledger/balance/COMPANY:9", headers=as_cashier).json()
        assert Decimal(data["balance"]) == 0
        assert data["entry_count"] == 0

    def test_balance_is_scoped(self, client, as_cashier, as_other_cashier):
        _entry(client, as_cashier)
        data = client.get("/api/v1/ledger/balance/CUSTOMER:42", headers=as_other_cashier).json()
        assert data["entry_count"] == 0

    def test_malformed_subject_key(self, client, as_cashier):
        response = client.get("/api/v1/ledger/balance/CUSTOMER42", headers=as_cashier)
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_QUERY"

    def test_inverted_date_range(self, client, as_cashier):
        response = client.get(
            "/api/v1/ledger/balance/CUSTOMER:42",
            params={"date_from": "2024-01-05", "date_to": "2024-01-01"},
            headers=as_cashier,
        )
        assert response.status_code == 400

    def test_missing_identity(self, client):
        response = client.get("/api/v1/ledger/balance/CUSTOMER:42")
        assert response.status_code == 401


class TestTransactions:

    def test_partial_payment(self, client, as_cashier):
        response = client.post(
            "/api/v1/ledger/transactions",
            json={
                "subject_type": "CUSTOMER",
                "subject_id": "42",
                "bill_amount": "1000",
                "payment_amount": "400",
            },
            headers=as_cashier,
        )

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["previous_balance"]) == 0
        assert Decimal(data["new_balance"]) == Decimal("600")
        assert len(data["entries"]) == 2

    def test_sub_cent_bill_rejected(self, client, as_cashier):
        response = client.post(
            "/api/v1/ledger/transactions",
            json={
                "subject_type": "CUSTOMER",
                "subject_id": "42",
                "bill_amount": "10.005",
                "payment_amount": "0",
            },
            headers=as_cashier,
        )
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_statement_running_balance(self, client, as_cashier):
        _entry(client, as_cashier)
        _entry(client, as_cashier, entry_type="PAYMENT", debit_amount=None, credit_amount="250")

        data = client.get("/api/v1/ledger/entries/CUSTOMER:42", headers=as_cashier).json()

        assert Decimal(data["opening_balance"]) == 0
        assert [Decimal(line["running_balance"]) for line in data["lines"]] == [
            Decimal("1000"),
            Decimal("750"),
        ]
        assert Decimal(data["closing_balance"]) == Decimal("750")
