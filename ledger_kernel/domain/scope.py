"""
Scope filter (``ledger_kernel.domain.scope``).

Responsibility
--------------
Turns the acting user's role and assignment into the scope every store
query must be restricted to.  Resolution happens in exactly one place,
``resolve_scope``; the result is passed explicitly into every service and
selector call, which apply it through ``ResolvedScope.predicates``.

Rules
-----
* CASHIER           -> BRANCH / actor.branch_id, whatever was requested
* WAREHOUSE_KEEPER  -> WAREHOUSE / actor.warehouse_id, whatever was requested
* ADMIN             -> the requested scope, or all scopes when none given

A non-admin without an assignment, or an unknown role, is forbidden.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ledger_kernel.exceptions import ForbiddenError, ValidationError


class Role(str, Enum):
    ADMIN = "ADMIN"
    CASHIER = "CASHIER"
    WAREHOUSE_KEEPER = "WAREHOUSE_KEEPER"


class ScopeType(str, Enum):
    BRANCH = "BRANCH"
    WAREHOUSE = "WAREHOUSE"


@dataclass(frozen=True)
class ActorContext:
    """Identity of the acting user, supplied by the auth collaborator."""

    user_id: str
    role: str
    user_name: str | None = None
    branch_id: str | None = None
    warehouse_id: str | None = None


@dataclass(frozen=True)
class ResolvedScope:
    """
    The scope a single operation is restricted to.

    ``scope_type`` and ``scope_id`` both None means all scopes (admin only).
    ``scope_type`` without ``scope_id`` restricts to every branch, or every
    warehouse.
    """

    scope_type: ScopeType | None = None
    scope_id: str | None = None

    @classmethod
    def all_scopes(cls) -> ResolvedScope:
        return cls()

    @property
    def is_all(self) -> bool:
        return self.scope_type is None and self.scope_id is None

    @property
    def is_concrete(self) -> bool:
        return self.scope_type is not None and self.scope_id is not None

    def predicates(self, scope_type_column: Any, scope_id_column: Any) -> list[Any]:
        """SQL predicates restricting the two scope columns to this scope."""
        clauses = []
        if self.scope_type is not None:
            clauses.append(scope_type_column == self.scope_type.value)
        if self.scope_id is not None:
            clauses.append(scope_id_column == self.scope_id)
        return clauses

    def includes(self, scope_type: str | None, scope_id: str | None) -> bool:
        """True if a row stored with this scope_type/scope_id is visible."""
        if self.scope_type is not None and scope_type != self.scope_type.value:
            return False
        if self.scope_id is not None and scope_id != self.scope_id:
            return False
        return True

    def require_concrete(self) -> tuple[ScopeType, str]:
        """Scope for a write that must land in exactly one branch or warehouse."""
        if not self.is_concrete:
            raise ValidationError(
                "scope", "scope_type and scope_id are required"
            )
        return self.scope_type, self.scope_id

    def __str__(self) -> str:
        if self.is_all:
            return "ALL"
        return f"{self.scope_type.value if self.scope_type else '*'}:{self.scope_id or '*'}"


def parse_role(actor: ActorContext) -> Role:
    try:
        return Role(str(actor.role).upper())
    except ValueError:
        raise ForbiddenError(
            action="resolve_scope",
            role=actor.role,
            reason=f"unknown role {actor.role!r}",
        ) from None


def parse_scope_type(value: str | ScopeType | None) -> ScopeType | None:
    if value is None or isinstance(value, ScopeType):
        return value
    try:
        return ScopeType(str(value).upper())
    except ValueError:
        raise ValidationError(
            "scope_type", f"must be one of {[s.value for s in ScopeType]}"
        ) from None


def resolve_scope(
    actor: ActorContext,
    requested_type: str | ScopeType | None = None,
    requested_id: str | None = None,
) -> ResolvedScope:
    """
    Resolve the scope the actor may act in.

    Non-admin requests for another scope are silently overridden with the
    actor's own assignment.

    Raises:
        ForbiddenError: Unknown role, or non-admin without an assignment.
        ValidationError: Admin passed a scope_id without a scope_type.
    """
    role = parse_role(actor)

    if role is Role.CASHIER:
        if not actor.branch_id:
            raise ForbiddenError(
                action="resolve_scope",
                role=role.value,
                reason="cashier has no branch assignment",
            )
        return ResolvedScope(ScopeType.BRANCH, str(actor.branch_id))

    if role is Role.WAREHOUSE_KEEPER:
        if not actor.warehouse_id:
            raise ForbiddenError(
                action="resolve_scope",
                role=role.value,
                reason="warehouse keeper has no warehouse assignment",
            )
        return ResolvedScope(ScopeType.WAREHOUSE, str(actor.warehouse_id))

    scope_type = parse_scope_type(requested_type)
    if requested_id is not None and scope_type is None:
        raise ValidationError("scope_type", "required when scope_id is given")
    return ResolvedScope(
        scope_type,
        str(requested_id) if requested_id is not None else None,
    )


def require_admin(actor: ActorContext, action: str) -> None:
    """
    Raises:
        ForbiddenError: If the actor is not an ADMIN.
    """
    role = parse_role(actor)
    if role is not Role.ADMIN:
        raise ForbiddenError(
            action=action,
            role=role.value,
            reason="admin role required",
        )


def apply_scope(stmt: Any, scope: ResolvedScope, scope_type_column: Any, scope_id_column: Any) -> Any:
    """Restrict a SELECT to ``scope``; a no-op for all scopes."""
    clauses = scope.predicates(scope_type_column, scope_id_column)
    return stmt.where(*clauses) if clauses else stmt
