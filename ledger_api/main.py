"""
Application factory.

``create_app()`` wires settings, logging, the database engine, error
handlers and routers.  ``app`` is the module-level instance for ASGI
servers (``uvicorn ledger_api.main:app``).
"""

from typing import Optional
from uuid import uuid4

from fastapi import FastAPI, Request

from ledger_api.error_handlers import register_error_handlers
from ledger_api.routers import accounts, ledger, reports, vouchers
from ledger_config import LedgerSettings, get_settings
from ledger_kernel import __version__
from ledger_kernel.db import init_engine_from_url
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.logging_config import LogContext, configure_logging


def create_app(
    settings: Optional[LedgerSettings] = None,
    *,
    clock: Optional[Clock] = None,
    init_engine: bool = True,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(level=settings.log_level)
    if init_engine:
        db = settings.database
        init_engine_from_url(
            db.url,
            echo=db.echo,
            pool_size=db.pool_size,
            max_overflow=db.max_overflow,
            pool_timeout=db.pool_timeout,
            pool_recycle=db.pool_recycle,
        )

    app = FastAPI(title="POS Ledger", version=__version__)
    app.state.settings = settings
    app.state.clock = clock or SystemClock()

    @app.middleware("http")
    async def bind_log_context(request: Request, call_next):
        correlation_id = request.headers.get("x-correlation-id") or str(uuid4())
        with LogContext.bind(
            correlation_id=correlation_id,
            actor_id=request.headers.get("x-user-id"),
        ):
            response = await call_next(request)
        response.headers["X-Correlation-Id"] = correlation_id
        return response

    register_error_handlers(app)

    app.include_router(vouchers.router, prefix="/api/v1/vouchers", tags=["vouchers"])
    app.include_router(ledger.router, prefix="/api/v1/ledger", tags=["ledger"])
    app.include_router(reports.router, prefix="/api/v1/reports", tags=["reports"])
    app.include_router(accounts.router, prefix="/api/v1/accounts", tags=["accounts"])

    @app.get("/")
    def read_root():
        return {"service": "pos-ledger", "version": __version__, "currency": settings.currency}

    return app


def __getattr__(name: str):
    # ASGI entrypoint, built on first access.
    if name == "app":
        return create_app()
    raise AttributeError(name)
