"""
Tests for scope resolution.

A cashier or warehouse keeper is always pinned to their own assignment,
whatever scope they ask for; only an admin may choose.
"""

import pytest
from sqlalchemy import column

from ledger_kernel.domain.scope import (
    ActorContext,
    ResolvedScope,
    ScopeType,
    require_admin,
    resolve_scope,
)
from ledger_kernel.exceptions import ForbiddenError, ValidationError


class TestResolveScope:

    @pytest.mark.parametrize(
        "requested_type, requested_id",
        [
            (None, None),
            ("BRANCH", "2"),
            ("WAREHOUSE", "W1"),
            ("branch", "1"),
        ],
    )
    def test_cashier_always_gets_own_branch(self, cashier, requested_type, requested_id):
        scope = resolve_scope(cashier, requested_type, requested_id)
        assert scope == ResolvedScope(ScopeType.BRANCH, "1")

    def test_keeper_always_gets_own_warehouse(self, keeper):
        scope = resolve_scope(keeper, "BRANCH", "1")
        assert scope.scope_type is ScopeType.WAREHOUSE
        assert scope.scope_id == "W1"

    def test_cashier_without_branch_forbidden(self):
        actor = ActorContext(user_id="u9", role="CASHIER")
        with pytest.raises(ForbiddenError) as exc_info:
            resolve_scope(actor)
        assert exc_info.value.role == "CASHIER"

    def test_keeper_without_warehouse_forbidden(self):
        with pytest.raises(ForbiddenError):
            resolve_scope(ActorContext(user_id="u9", role="WAREHOUSE_KEEPER", branch_id="1"))

    def test_unknown_role_forbidden(self):
        with pytest.raises(ForbiddenError):
            resolve_scope(ActorContext(user_id="u9", role="AUDITOR", branch_id="1"))

    def test_admin_without_request_sees_all(self, admin):
        scope = resolve_scope(admin)
        assert scope.is_all
        assert str(scope) == "ALL"

    def test_admin_narrows_to_requested(self, admin):
        scope = resolve_scope(admin, "warehouse", "W2")
        assert scope == ResolvedScope(ScopeType.WAREHOUSE, "W2")
        assert scope.is_concrete

    def test_admin_type_only(self, admin):
        scope = resolve_scope(admin, "BRANCH")
        assert not scope.is_concrete
        assert str(scope) == "BRANCH:*"

    def test_admin_id_without_type_rejected(self, admin):
        with pytest.raises(ValidationError):
            resolve_scope(admin, None, "1")

    def test_admin_unknown_type_rejected(self, admin):
        with pytest.raises(ValidationError):
            resolve_scope(admin, "REGION", "1")


class TestResolvedScope:

    def test_predicates_for_all_scopes_are_empty(self):
        assert ResolvedScope.all_scopes().predicates(column("t"), column("i")) == []

    def test_predicates_for_concrete_scope(self):
        clauses = ResolvedScope(ScopeType.BRANCH, "1").predicates(column("t"), column("i"))
        assert len(clauses) == 2

    def test_includes(self):
        scope = ResolvedScope(ScopeType.BRANCH, "1")
        assert scope.includes("BRANCH", "1")
        assert not scope.includes("BRANCH", "2")
        assert not scope.includes("WAREHOUSE", "1")
        assert ResolvedScope.all_scopes().includes("WAREHOUSE", "W1")

    def test_require_concrete(self):
        assert ResolvedScope(ScopeType.BRANCH, "1").require_concrete() == (ScopeType.BRANCH, "1")
        with pytest.raises(ValidationError):
            ResolvedScope(ScopeType.BRANCH).require_concrete()


class TestRequireAdmin:

    def test_admin_passes(self, admin):
        require_admin(admin, "approve_voucher")

    def test_lowercase_admin_role_passes(self):
        require_admin(ActorContext(user_id="u1", role="admin"), "approve_voucher")

    def test_cashier_forbidden(self, cashier):
        with pytest.raises(ForbiddenError) as exc_info:
            require_admin(cashier, "approve_voucher")
        assert exc_info.value.action == "approve_voucher"
