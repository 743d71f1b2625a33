"""
Customer service.

Customers live in the ledger; this service validates form input, strips
blank fields before submission and publishes CustomerCreated.
"""

import logging

from clients.ledger_client import LedgerClient
from core.event_bus import EventBus
from core.events import CustomerCreated
from core.models import Customer, CustomerCreate, Page

logger = logging.getLogger(__name__)


class CustomerService:
    """Service for customer operations."""

    def __init__(self, ledger: LedgerClient, event_bus: EventBus | None = None, page_size: int = 20):
        self.ledger = ledger
        self.event_bus = event_bus or EventBus()
        self.page_size = page_size

    def create(self, data: CustomerCreate) -> Customer:
        """
        Create a new customer.

        Blank fields, an empty address and empty metadata are omitted so the
        ledger never stores empty strings.

        Args:
            data: Customer creation data

        Returns:
            Created customer
        """
        customer = self.ledger.create_customer(data.to_params())
        logger.info(f"Created customer {customer.id}")

        self.event_bus.publish(CustomerCreated.create(customer=customer))

        return customer

    def get(self, customer_id: str) -> Customer:
        return self.ledger.retrieve_customer(customer_id)

    def list(self, limit: int | None = None, starting_after: str | None = None) -> Page[Customer]:
        """List customers newest first, one page at a time."""
        return self.ledger.list_customers(
            limit=limit or self.page_size,
            starting_after=starting_after,
        )

    def search(self, term: str | None) -> Page[Customer]:
        """Search by name or email. Blank terms list instead."""
        term = (term or "").strip()
        if not term:
            return self.list()

        escaped = term.replace('"', '\\"')
        return self.ledger.search_customers(f'name:"{escaped}" OR email:"{escaped}"')
