"""Response envelope shared by every /api endpoint."""

from datetime import datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel

from core.models import Page
from utils.timezone import now_utc


class APIError(BaseModel):
    code: str
    message: str


class APIMeta(BaseModel):
    timestamp: datetime
    request_id: str


class PageInfo(BaseModel):
    """Cursor details for list endpoints. Pass next_cursor back as starting_after."""

    count: int
    has_more: bool
    next_cursor: str | None = None


class APIResponse(BaseModel):
    """
    Envelope for all API responses.

    Exactly one of ``data`` and ``error`` is set, so a rejected invoice
    action can never read as a silent no-op.
    """

    success: bool
    data: Any | None = None
    error: APIError | None = None
    page: PageInfo | None = None
    meta: APIMeta

    def to_json(self) -> dict:
        return self.model_dump(mode="json")


def _meta(request_id: str | None) -> APIMeta:
    return APIMeta(timestamp=now_utc(), request_id=request_id or str(uuid4()))


def success_response(data: Any, request_id: str | None = None) -> APIResponse:
    return APIResponse(success=True, data=data, meta=_meta(request_id))


def page_response(page: Page, request_id: str | None = None) -> APIResponse:
    """Success envelope for one page of ledger objects."""
    return APIResponse(
        success=True,
        data=[item.model_dump(mode="json") for item in page.data],
        page=PageInfo(
            count=len(page.data),
            has_more=page.has_more,
            next_cursor=page.last_id if page.has_more else None,
        ),
        meta=_meta(request_id),
    )


def error_response(code: str, message: str, request_id: str | None = None) -> APIResponse:
    return APIResponse(
        success=False,
        error=APIError(code=code, message=message),
        meta=_meta(request_id),
    )


class ErrorCodes:
    """Codes for failures raised outside InvoiceDeskError, which reports its own ``kind``."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    INTERNAL_ERROR = "INTERNAL_ERROR"
