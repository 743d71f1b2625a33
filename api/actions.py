"""POST /api/actions - unified mutation endpoint."""

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from api.base import success_response
from core.connection import StripeConnection
from core.models import CustomerCreate, InvoiceAction, InvoiceCreate


class ActionRequest(BaseModel):
    domain: str
    action: str
    data: dict = Field(default_factory=dict)


def create_actions_router(services, connection: StripeConnection) -> APIRouter:
    router = APIRouter()

    handlers = {
        "invoice": InvoiceHandler(services),
        "customer": CustomerHandler(services),
        "settings": SettingsHandler(connection),
    }

    @router.post("/actions")
    def perform_action(request: Request, body: ActionRequest):
        handler = handlers.get(body.domain)
        if handler is None:
            raise ValueError(
                f"Unknown domain '{body.domain}'. "
                f"Valid domains: {', '.join(sorted(handlers.keys()))}"
            )

        if body.action not in handler.ALLOWED_ACTIONS:
            raise ValueError(
                f"Action '{body.action}' not allowed on '{body.domain}'. "
                f"Allowed: {', '.join(sorted(handler.ALLOWED_ACTIONS))}"
            )

        method = getattr(handler, f"_handle_{body.action}")
        result = method(body.data)
        request_id = getattr(request.state, "request_id", None)
        return success_response(result, request_id=request_id).to_json()

    return router


def _require_id(data: dict) -> str:
    invoice_id = data.get("id")
    if not invoice_id:
        raise ValueError("'id' is required")
    return str(invoice_id)


# =============================================================================
# HANDLER CLASSES
# =============================================================================


class InvoiceHandler:
    ALLOWED_ACTIONS = {"create"} | {a.value for a in InvoiceAction}

    def __init__(self, services):
        self.services = services

    def _handle_create(self, data: dict):
        result = self.services.invoice.create(InvoiceCreate(**data))
        payload = result.model_dump(mode="json")
        payload["is_partial"] = result.is_partial
        return payload

    def _perform(self, action: InvoiceAction, data: dict):
        result = self.services.invoice_action.request_action(_require_id(data), action)
        return result.model_dump(mode="json")

    def _handle_finalize(self, data: dict):
        return self._perform(InvoiceAction.FINALIZE, data)

    def _handle_send(self, data: dict):
        return self._perform(InvoiceAction.SEND, data)

    def _handle_pay(self, data: dict):
        return self._perform(InvoiceAction.PAY, data)

    def _handle_void(self, data: dict):
        return self._perform(InvoiceAction.VOID, data)

    def _handle_mark_uncollectible(self, data: dict):
        return self._perform(InvoiceAction.MARK_UNCOLLECTIBLE, data)


class CustomerHandler:
    ALLOWED_ACTIONS = {"create"}

    def __init__(self, services):
        self.services = services

    def _handle_create(self, data: dict):
        customer = self.services.customer.create(CustomerCreate(**data))
        payload = customer.model_dump(mode="json")
        payload["display_label"] = customer.display_label
        return payload


class SettingsHandler:
    ALLOWED_ACTIONS = {"set_api_key", "disconnect", "test_connection"}

    def __init__(self, connection: StripeConnection):
        self.connection = connection

    def _status(self) -> dict:
        return {
            "connected": self.connection.is_connected,
            "masked_key": self.connection.masked_key,
        }

    def _handle_set_api_key(self, data: dict):
        result = self.connection.set_api_key(data.get("api_key", ""))
        if not result.success:
            raise ValueError(result.error or "Failed to save API key")
        return self._status()

    def _handle_disconnect(self, data: dict):
        self.connection.disconnect()
        return self._status()

    def _handle_test_connection(self, data: dict):
        return {"ok": self.connection.test_connection(), **self._status()}
