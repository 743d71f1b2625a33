"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from core.exceptions import (
    InvoiceDeskError,
    NotConnectedError,
    PreconditionError,
    RemoteError,
    ValidationError,
)

logger = logging.getLogger(__name__)


_STATUS_BY_CATEGORY: list[tuple[type[InvoiceDeskError], int]] = [
    (ValidationError, 400),
    (PreconditionError, 409),
    (RemoteError, 502),
    (NotConnectedError, 503),
]

# 401/403 concern our API key, not the caller's request
_PASSTHROUGH_REMOTE_STATUSES = frozenset(range(400, 500)) - {401, 403}


def status_for(exc: InvoiceDeskError) -> int:
    """
    HTTP status for an invoice desk error, by category.

    A ledger 4xx about the request itself (missing invoice, declined card)
    keeps its status. Ledger auth failures and everything else upstream are 502.
    """
    if isinstance(exc, RemoteError) and exc.http_status in _PASSTHROUGH_REMOTE_STATUSES:
        return exc.http_status
    for exc_type, status_code in _STATUS_BY_CATEGORY:
        if isinstance(exc, exc_type):
            return status_code
    return 500


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(InvoiceDeskError)
    async def invoice_desk_error_handler(request: Request, exc: InvoiceDeskError):
        status_code = status_for(exc)
        if status_code >= 500:
            logger.warning(f"{exc.kind}: {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content=error_response(
                exc.kind, exc.message, request_id=_request_id(request)
            ).to_json(),
        )

    @app.exception_handler(PydanticValidationError)
    async def model_validation_error_handler(request: Request, exc: PydanticValidationError):
        return JSONResponse(
            status_code=400,
            content=error_response(
                ErrorCodes.VALIDATION_ERROR,
                str(exc.errors(include_url=False)),
                request_id=_request_id(request),
            ).to_json(),
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(
            status_code=400,
            content=error_response(
                ErrorCodes.INVALID_REQUEST, str(exc), request_id=_request_id(request)
            ).to_json(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content=error_response(
                ErrorCodes.VALIDATION_ERROR,
                str(exc.errors()),
                request_id=_request_id(request),
            ).to_json(),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return JSONResponse(
            status_code=500,
            content=error_response(
                ErrorCodes.INTERNAL_ERROR,
                "An internal error occurred",
                request_id=_request_id(request),
            ).to_json(),
        )
