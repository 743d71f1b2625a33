"""Shared test fixtures for invoice desk test suite."""

import re
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env")

from clients.ledger_client import LedgerClient
from core.event_bus import EventBus
from core.exceptions import RemoteError
from core.models import Customer, Invoice, Page, Price
from utils.timezone import now_utc, to_unix


# =============================================================================
# IN-MEMORY LEDGER
# =============================================================================


class FakeLedger(LedgerClient):
    """
    In-memory ledger with Stripe-like invoice transitions.

    Every call is recorded in ``calls`` as ``(method, *args)`` so tests can
    assert which remote calls were (and were not) made.
    """

    def __init__(self):
        self.invoices: dict[str, dict[str, Any]] = {}
        self.customers: dict[str, dict[str, Any]] = {}
        self.prices: dict[str, dict[str, Any]] = {}
        self.items: list[dict[str, Any]] = []
        self.calls: list[tuple] = []
        # method name -> error raised on every call to it
        self.fail_on: dict[str, RemoteError] = {}
        # zero-based create_invoice_item call index -> error
        self.item_failures: dict[int, RemoteError] = {}
        # False simulates a send the ledger accepted but never timestamped
        self.send_records_timestamp = True
        self._seq = 0
        self._clock = to_unix(now_utc())
        self._item_calls = 0

    # -------------------------------------------------------------------------
    # Seeding helpers
    # -------------------------------------------------------------------------

    def _next_id(self, prefix: str) -> str:
        self._seq += 1
        return f"{prefix}_{self._seq:04d}"

    def _tick(self) -> int:
        """Strictly increasing creation time, so newest-first order is stable."""
        self._clock += 1
        return self._clock

    def add_invoice(self, **fields) -> Invoice:
        invoice = {
            "id": fields.pop("id", None) or self._next_id("in"),
            "status": "draft",
            "collection_method": "send_invoice",
            "customer": None,
            "customer_email": None,
            "last_send_at": None,
            "currency": "gbp",
            "subtotal": 0,
            "total": 0,
            "amount_due": 0,
            "amount_paid": 0,
            "created": self._tick(),
        }
        invoice.update(fields)
        self.invoices[invoice["id"]] = invoice
        return Invoice.model_validate(invoice)

    def add_customer(self, **fields) -> Customer:
        customer = {"id": fields.pop("id", None) or self._next_id("cus"), "balance": 0}
        customer.update(fields)
        self.customers[customer["id"]] = customer
        return Customer.model_validate(customer)

    def add_price(self, **fields) -> Price:
        price = {
            "id": fields.pop("id", None) or self._next_id("price"),
            "currency": "gbp",
            "unit_amount": 1000,
            "active": True,
        }
        price.update(fields)
        self.prices[price["id"]] = price
        return Price.model_validate(price)

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise self.fail_on[name]

    def _get_invoice(self, invoice_id: str) -> dict[str, Any]:
        if invoice_id not in self.invoices:
            raise RemoteError(f"No such invoice: '{invoice_id}'", code="resource_missing", http_status=404)
        return self.invoices[invoice_id]

    def _require_status(self, invoice: dict[str, Any], *statuses: str) -> None:
        if invoice["status"] not in statuses:
            raise RemoteError(
                f"This invoice is {invoice['status']} and cannot be modified this way.",
                code="invoice_not_editable",
                http_status=400,
            )

    def _recompute_totals(self, invoice: dict[str, Any]) -> None:
        total = 0
        for item in self.items:
            if item["invoice"] == invoice["id"]:
                total += item["amount"]
        invoice["subtotal"] = total
        invoice["total"] = total
        invoice["amount_due"] = total - invoice["amount_paid"]

    def _page(self, rows: list[dict[str, Any]], model: type, limit: int, starting_after: str | None) -> Page:
        if starting_after is not None:
            ids = [row["id"] for row in rows]
            rows = rows[ids.index(starting_after) + 1:] if starting_after in ids else []
        return Page[model](
            data=[model.model_validate(row) for row in rows[:limit]],
            has_more=len(rows) > limit,
        )

    @staticmethod
    def _query_term(query: str) -> str:
        match = re.search(r'"((?:[^"\\]|\\.)*)"', query)
        return match.group(1).replace('\\"', '"') if match else ""

    # -------------------------------------------------------------------------
    # Invoices
    # -------------------------------------------------------------------------

    def retrieve_invoice(self, invoice_id):
        self._record("retrieve_invoice", invoice_id)
        return Invoice.model_validate(self._get_invoice(invoice_id))

    def list_invoices(self, status=None, limit=20, starting_after=None):
        self._record("list_invoices", status, limit, starting_after)
        rows = sorted(self.invoices.values(), key=lambda i: i["created"], reverse=True)
        if status:
            rows = [row for row in rows if row["status"] == status]
        return self._page(rows, Invoice, limit, starting_after)

    def search_invoices(self, query):
        self._record("search_invoices", query)
        term = self._query_term(query)
        rows = [
            row for row in self.invoices.values()
            if row.get("number") == term or row.get("customer") == term
        ]
        return Page[Invoice](data=[Invoice.model_validate(row) for row in rows])

    def create_invoice(self, params):
        self._record("create_invoice", dict(params))
        fields = {k: v for k, v in params.items() if k not in ("auto_advance", "days_until_due")}
        return self.add_invoice(**fields)

    def update_invoice(self, invoice_id, params):
        self._record("update_invoice", invoice_id, dict(params))
        invoice = self._get_invoice(invoice_id)
        if "collection_method" in params:
            self._require_status(invoice, "draft")
        invoice.update(params)
        return Invoice.model_validate(invoice)

    def create_invoice_item(self, params):
        self._record("create_invoice_item", dict(params))
        index = self._item_calls
        self._item_calls += 1
        if index in self.item_failures:
            raise self.item_failures[index]

        invoice = self._get_invoice(params["invoice"])
        quantity = params.get("quantity", 1)
        if "pricing" in params:
            price = self.prices[params["pricing"]["price"]]
            unit = Decimal(price["unit_amount"])
        else:
            unit = Decimal(params["unit_amount_decimal"])

        item = {
            "id": self._next_id("ii"),
            "invoice": invoice["id"],
            "quantity": quantity,
            "amount": int(unit * quantity),
            "description": params.get("description"),
        }
        self.items.append(item)
        self._recompute_totals(invoice)
        return dict(item)

    def finalize_invoice(self, invoice_id):
        self._record("finalize_invoice", invoice_id)
        invoice = self._get_invoice(invoice_id)
        self._require_status(invoice, "draft")
        invoice["status"] = "open"
        return Invoice.model_validate(invoice)

    def send_invoice(self, invoice_id):
        self._record("send_invoice", invoice_id)
        invoice = self._get_invoice(invoice_id)
        self._require_status(invoice, "draft", "open")
        if invoice["collection_method"] != "send_invoice":
            raise RemoteError("You can only send invoices with collection_method=send_invoice.")
        invoice["status"] = "open"
        if self.send_records_timestamp:
            invoice["last_send_at"] = to_unix(now_utc())
        return Invoice.model_validate(invoice)

    def pay_invoice(self, invoice_id):
        self._record("pay_invoice", invoice_id)
        invoice = self._get_invoice(invoice_id)
        self._require_status(invoice, "open", "uncollectible")
        invoice["status"] = "paid"
        invoice["amount_paid"] = invoice["total"]
        invoice["amount_due"] = 0
        return Invoice.model_validate(invoice)

    def void_invoice(self, invoice_id):
        self._record("void_invoice", invoice_id)
        invoice = self._get_invoice(invoice_id)
        self._require_status(invoice, "draft", "open", "uncollectible")
        invoice["status"] = "void"
        return Invoice.model_validate(invoice)

    def mark_uncollectible(self, invoice_id):
        self._record("mark_uncollectible", invoice_id)
        invoice = self._get_invoice(invoice_id)
        self._require_status(invoice, "open")
        invoice["status"] = "uncollectible"
        return Invoice.model_validate(invoice)

    # -------------------------------------------------------------------------
    # Customers
    # -------------------------------------------------------------------------

    def retrieve_customer(self, customer_id):
        self._record("retrieve_customer", customer_id)
        if customer_id not in self.customers:
            raise RemoteError(f"No such customer: '{customer_id}'", code="resource_missing", http_status=404)
        return Customer.model_validate(self.customers[customer_id])

    def list_customers(self, limit=20, starting_after=None):
        self._record("list_customers", limit, starting_after)
        rows = list(reversed(list(self.customers.values())))
        return self._page(rows, Customer, limit, starting_after)

    def create_customer(self, params):
        self._record("create_customer", dict(params))
        return self.add_customer(**params)

    def search_customers(self, query):
        self._record("search_customers", query)
        term = self._query_term(query).lower()
        rows = [
            row for row in self.customers.values()
            if term in (row.get("name") or "").lower() or term == (row.get("email") or "").lower()
        ]
        return Page[Customer](data=[Customer.model_validate(row) for row in rows])

    # -------------------------------------------------------------------------
    # Catalog / account
    # -------------------------------------------------------------------------

    def list_prices(self, active=True, limit=100, expand_product=True):
        self._record("list_prices", active, limit, expand_product)
        rows = [row for row in self.prices.values() if active is None or row["active"] == active]
        return self._page(rows, Price, limit, None)

    def retrieve_balance(self):
        self._record("retrieve_balance")
        return {"object": "balance", "available": [{"amount": 0, "currency": "gbp"}]}


# =============================================================================
# LEDGER FIXTURES
# =============================================================================


@pytest.fixture
def ledger() -> FakeLedger:
    """Empty in-memory ledger."""
    return FakeLedger()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def published(event_bus) -> list:
    """Every event published on ``event_bus``, in order."""
    events = []
    for name in (
        "InvoiceCreated", "InvoiceActionPerformed", "InvoiceSent", "CustomerCreated",
    ):
        event_bus.subscribe(name, events.append)
    return events


@pytest.fixture
def customer_with_email(ledger) -> Customer:
    return ledger.add_customer(id="cus_1", name="Ada Lovelace", email="ada@example.com")


@pytest.fixture
def customer_without_email(ledger) -> Customer:
    return ledger.add_customer(id="cus_noemail", name="No Email Ltd")
