"""
One place that turns exceptions into HTTP responses.

Every error body has the same shape::

    {"success": false, "code": "...", "message": "...", "details": {...}}
"""

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ledger_kernel.exceptions import (
    ForbiddenError,
    InvalidQueryError,
    InvalidStateError,
    LedgerKernelError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from ledger_kernel.logging_config import get_logger

logger = get_logger("api.errors")

# First match wins; order subclasses before their bases.
_STATUS_BY_ERROR: tuple[tuple[type[LedgerKernelError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (InvalidQueryError, status.HTTP_400_BAD_REQUEST),
    (InvalidStateError, status.HTTP_400_BAD_REQUEST),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (StoreUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for(exc: LedgerKernelError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(code: str, message: str, details=None) -> dict:
    return {
        "success": False,
        "code": code,
        "message": message,
        "details": jsonable_encoder(details or {}),
    }


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(LedgerKernelError)
    async def handle_kernel_error(request: Request, exc: LedgerKernelError):
        status_code = status_for(exc)
        log = logger.error if status_code >= 500 else logger.info
        log(
            "request_failed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": status_code,
                "error_code": exc.code,
            },
        )
        return JSONResponse(
            status_code=status_code,
            content=error_body(exc.code, str(exc), exc.to_details()),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(
                ValidationError.code,
                "Request validation failed",
                {"errors": exc.errors()},
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(f"HTTP_{exc.status_code}", str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )
