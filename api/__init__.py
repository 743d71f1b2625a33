"""API modules for HTTP interface."""

from api.base import (
    APIError,
    APIMeta,
    APIResponse,
    PageInfo,
    success_response,
    page_response,
    error_response,
    ErrorCodes,
)
from api.app import create_app
