"""
Remote ledger interface.

The ledger is the system of record for invoices, customers and prices.
Services receive an implementation explicitly; nothing reaches for a
global client. Every method either returns the ledger's authoritative
view or raises RemoteError with the upstream message intact.
"""

from abc import ABC, abstractmethod
from typing import Any

from core.models import Customer, Invoice, Page, Price


class LedgerClient(ABC):
    """Narrow interface over the remote ledger's invoice, customer and price APIs."""

    # -------------------------------------------------------------------------
    # Invoices
    # -------------------------------------------------------------------------

    @abstractmethod
    def retrieve_invoice(self, invoice_id: str) -> Invoice:
        """Fetch one invoice by id."""

    @abstractmethod
    def list_invoices(
        self,
        status: str | None = None,
        limit: int = 20,
        starting_after: str | None = None,
    ) -> Page[Invoice]:
        """List invoices newest first, optionally filtered by status."""

    @abstractmethod
    def search_invoices(self, query: str) -> Page[Invoice]:
        """Search invoices with the ledger's query language."""

    @abstractmethod
    def create_invoice(self, params: dict[str, Any]) -> Invoice:
        """Create an invoice shell (no line items)."""

    @abstractmethod
    def update_invoice(self, invoice_id: str, params: dict[str, Any]) -> Invoice:
        """Update fields on an invoice."""

    @abstractmethod
    def create_invoice_item(self, params: dict[str, Any]) -> dict[str, Any]:
        """Attach one invoice item. Returns the raw item."""

    @abstractmethod
    def finalize_invoice(self, invoice_id: str) -> Invoice:
        """draft -> open."""

    @abstractmethod
    def send_invoice(self, invoice_id: str) -> Invoice:
        """Email an open invoice to its customer."""

    @abstractmethod
    def pay_invoice(self, invoice_id: str) -> Invoice:
        """Collect payment on an open invoice."""

    @abstractmethod
    def void_invoice(self, invoice_id: str) -> Invoice:
        """Void an invoice."""

    @abstractmethod
    def mark_uncollectible(self, invoice_id: str) -> Invoice:
        """Write an open invoice off as uncollectible."""

    # -------------------------------------------------------------------------
    # Customers
    # -------------------------------------------------------------------------

    @abstractmethod
    def retrieve_customer(self, customer_id: str) -> Customer:
        """Fetch one customer by id."""

    @abstractmethod
    def list_customers(
        self,
        limit: int = 20,
        starting_after: str | None = None,
    ) -> Page[Customer]:
        """List customers newest first."""

    @abstractmethod
    def create_customer(self, params: dict[str, Any]) -> Customer:
        """Create a customer."""

    @abstractmethod
    def search_customers(self, query: str) -> Page[Customer]:
        """Search customers with the ledger's query language."""

    # -------------------------------------------------------------------------
    # Catalog / account
    # -------------------------------------------------------------------------

    @abstractmethod
    def list_prices(
        self,
        active: bool | None = True,
        limit: int = 100,
        expand_product: bool = True,
    ) -> Page[Price]:
        """List catalog prices."""

    @abstractmethod
    def retrieve_balance(self) -> dict[str, Any]:
        """Account balance. Used as a cheap authenticated ping."""
