"""
Request-scoped dependencies: identity, scope, settings and clock.

Identity is established upstream; this service trusts the headers the auth
gateway forwards and only checks that they are present.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Query, Request, status

from ledger_config import LedgerSettings
from ledger_kernel.domain.clock import Clock
from ledger_kernel.domain.ledger import DateRange
from ledger_kernel.domain.scope import ActorContext, ResolvedScope, resolve_scope


def get_settings(request: Request) -> LedgerSettings:
    return request.app.state.settings


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_actor(
    x_user_id: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
    x_branch_id: Optional[str] = Header(None),
    x_warehouse_id: Optional[str] = Header(None),
) -> ActorContext:
    """
    Build the acting user from the forwarded identity headers.
    Raises 401 when the user id or role is missing.
    """
    if not x_user_id or not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing identity headers",
        )
    return ActorContext(
        user_id=x_user_id,
        role=x_user_role,
        user_name=x_user_name,
        branch_id=x_branch_id or None,
        warehouse_id=x_warehouse_id or None,
    )


def get_scope(
    actor: ActorContext = Depends(get_actor),
    scope_type: Optional[str] = Query(None),
    scope_id: Optional[str] = Query(None),
) -> ResolvedScope:
    """Scope for this request; only an admin's scope_type/scope_id are honoured."""
    return resolve_scope(actor, scope_type, scope_id)


def get_date_range(
    date_from: Optional[str] = Query(None),
    date_to: Optional[str] = Query(None),
) -> DateRange:
    return DateRange.parse(date_from, date_to)
