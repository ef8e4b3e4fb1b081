"""Fixtures for HTTP tests: an app bound to the test engine and header helpers."""

import pytest
from fastapi.testclient import TestClient

from ledger_api.main import create_app
from ledger_config import get_settings


@pytest.fixture
def client(committed_db, database_url, clock):
    settings = get_settings(environ={"DATABASE_URL": database_url})
    app = create_app(settings, clock=clock, init_engine=False)
    with TestClient(app) as test_client:
        yield test_client


def headers_for(actor) -> dict:
    headers = {"X-User-Id": actor.user_id, "X-User-Role": actor.role}
    if actor.user_name:
        headers["X-User-Name"] = actor.user_name
    if actor.branch_id:
        headers["X-Branch-Id"] = actor.branch_id
    if actor.warehouse_id:
        headers["X-Warehouse-Id"] = actor.warehouse_id
    return headers


@pytest.fixture
def as_admin(admin):
    return headers_for(admin)


@pytest.fixture
def as_cashier(cashier):
    return headers_for(cashier)


@pytest.fixture
def as_other_cashier(other_cashier):
    return headers_for(other_cashier)
