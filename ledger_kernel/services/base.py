"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor for every service that writes.  Each
    receives a SQLAlchemy ``Session`` from the caller and persists with
    ``session.flush()`` -- never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    Transaction boundaries: services flush within the caller's transaction
    and never commit or roll back.  ``session_scope()`` (or the test
    harness) owns commit/rollback, so a voucher status change and its
    history row land together or not at all.
"""

from abc import ABC

from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock


class BaseService(ABC):
    """
    Abstract base class for all kernel services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide scoped read methods -- those belong in
          ``ledger_kernel/selectors/``.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        """
        Args:
            session: SQLAlchemy session for database operations.
            clock: Time source for every timestamp this service writes.
        """
        self.session = session
        self._clock = clock or SystemClock()
