"""GET /api/data - unified read endpoint."""

from fastapi import APIRouter, Query, Request

from api.base import page_response, success_response
from core.connection import StripeConnection
from core.services.invoice_action_service import allowed_actions, is_terminal


VALID_TYPES = {"invoices", "customers", "prices", "dashboard"}


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def create_data_router(services, connection: StripeConnection) -> APIRouter:
    router = APIRouter()

    # -------------------------------------------------------------------------
    # Convenience routes (must be registered before the generic /data route)
    # -------------------------------------------------------------------------

    @router.get("/data/invoices/{invoice_id}/actions")
    def invoice_actions(request: Request, invoice_id: str):
        invoice = services.invoice.get(invoice_id)
        return success_response({
            "invoice_id": invoice.id,
            "status": invoice.status.value,
            "actions": sorted(a.value for a in allowed_actions(invoice.status)),
            "terminal": is_terminal(invoice.status),
        }, _request_id(request)).to_json()

    @router.get("/data/settings")
    def settings(request: Request):
        return success_response({
            "connected": connection.is_connected,
            "masked_key": connection.masked_key,
            "api_version": connection.config.stripe_api_version,
        }, _request_id(request)).to_json()

    # -------------------------------------------------------------------------
    # Generic data endpoint
    # -------------------------------------------------------------------------

    @router.get("/data")
    def get_data(
        request: Request,
        type: str | None = Query(None),
        id: str | None = Query(None),
        search: str | None = Query(None),
        status: str | None = Query(None),
        limit: int | None = Query(None, ge=1, le=100),
        starting_after: str | None = Query(None),
        currency: str | None = Query(None, min_length=3, max_length=3),
    ):
        if type is None:
            raise ValueError("'type' query parameter is required")

        if type not in VALID_TYPES:
            raise ValueError(f"Unknown type '{type}'. Valid types: {', '.join(sorted(VALID_TYPES))}")

        request_id = _request_id(request)

        if type == "invoices":
            return _handle_invoices(services.invoice, request_id, id, search, status, limit, starting_after)

        if type == "customers":
            return _handle_customers(services.customer, request_id, id, search, limit, starting_after)

        if type == "prices":
            catalog = services.catalog
            if currency:
                page = catalog.prices_by_currency(currency, limit)
            else:
                page = catalog.list_active_prices(limit)
            return page_response(page, request_id).to_json()

        stats = services.dashboard.stats()
        return success_response(stats.model_dump(mode="json"), request_id).to_json()

    return router


def _handle_invoices(invoice_svc, request_id, id, search, status, limit, starting_after):
    if id:
        invoice = invoice_svc.get(id)
        return success_response(invoice.model_dump(mode="json"), request_id).to_json()

    if search:
        return page_response(invoice_svc.search(search), request_id).to_json()

    page = invoice_svc.list(status=status, limit=limit, starting_after=starting_after)
    return page_response(page, request_id).to_json()


def _handle_customers(customer_svc, request_id, id, search, limit, starting_after):
    if id:
        customer = customer_svc.get(id)
        data = customer.model_dump(mode="json")
        data["display_label"] = customer.display_label
        return success_response(data, request_id).to_json()

    if search:
        return page_response(customer_svc.search(search), request_id).to_json()

    page = customer_svc.list(limit=limit, starting_after=starting_after)
    return page_response(page, request_id).to_json()
