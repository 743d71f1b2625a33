"""Application factory and service wiring."""

import logging
import threading

from fastapi import FastAPI

from api.actions import create_actions_router
from api.data import create_data_router
from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
from clients.ledger_client import LedgerClient
from core.connection import Notifier, StripeConnection
from core.event_bus import EventBus
from core.events import InvoiceCreated, InvoiceSent
from core.handlers.invoice_created_handler import handle_invoice_created
from core.handlers.invoice_sent_handler import handle_invoice_sent
from core.services.catalog_service import CatalogService
from core.services.customer_service import CustomerService
from core.services.dashboard_service import DashboardService
from core.services.invoice_action_service import InvoiceActionService
from core.services.invoice_service import InvoiceService

logger = logging.getLogger(__name__)


class ServiceRegistry:
    """
    Services bound to the connection's current ledger client.

    Services are rebuilt only when the ledger client changes (a new key was
    saved), so the action controller's per-invoice locks survive between
    requests. Accessing any ledger-backed service while disconnected raises
    NotConnectedError.
    """

    def __init__(self, connection: StripeConnection, event_bus: EventBus):
        self.connection = connection
        self.event_bus = event_bus
        self._lock = threading.Lock()
        self._ledger: LedgerClient | None = None
        self._services: dict = {}

    def _current(self) -> dict:
        ledger = self.connection.ledger
        config = self.connection.config
        with self._lock:
            if ledger is not self._ledger:
                logger.info("Binding services to new ledger client")
                self._ledger = ledger
                self._services = {
                    "invoice": InvoiceService(ledger, self.event_bus, config=config),
                    "invoice_action": InvoiceActionService(ledger, self.event_bus),
                    "customer": CustomerService(ledger, self.event_bus, page_size=config.page_size),
                    "catalog": CatalogService(ledger, limit=config.price_list_limit),
                    "dashboard": DashboardService(ledger, sample_size=config.dashboard_sample_size),
                }
            return self._services

    @property
    def invoice(self) -> InvoiceService:
        return self._current()["invoice"]

    @property
    def invoice_action(self) -> InvoiceActionService:
        return self._current()["invoice_action"]

    @property
    def customer(self) -> CustomerService:
        return self._current()["customer"]

    @property
    def catalog(self) -> CatalogService:
        return self._current()["catalog"]

    @property
    def dashboard(self) -> DashboardService:
        return self._current()["dashboard"]


def create_app(
    connection: StripeConnection,
    event_bus: EventBus | None = None,
    notify: Notifier | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        connection: Stripe connection (key storage and ledger client)
        event_bus: Shared event bus; a new one is created if omitted
        notify: Optional (message, severity) callback for user-facing notices

    Returns:
        Configured application with /api/data and /api/actions routes
    """
    event_bus = event_bus or EventBus()
    event_bus.subscribe(InvoiceSent, handle_invoice_sent(notify))
    event_bus.subscribe(InvoiceCreated, handle_invoice_created(notify))

    services = ServiceRegistry(connection, event_bus)

    app = FastAPI(title="Invoice Desk")
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(create_data_router(services, connection), prefix="/api")
    app.include_router(create_actions_router(services, connection), prefix="/api")

    app.state.services = services
    app.state.connection = connection
    app.state.event_bus = event_bus

    return app
