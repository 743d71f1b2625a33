"""
Stripe implementation of the remote ledger.

Each instance carries its own API key and pins the API version on every
request, so two clients with different keys never share module state.
Stripe errors are translated to RemoteError with the upstream message
left as Stripe wrote it.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator

import stripe

from clients.ledger_client import LedgerClient
from core.exceptions import RemoteError
from core.models import Customer, Invoice, Page, Price

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2025-06-30.basil"


def _to_dict(obj: Any) -> dict[str, Any]:
    """Plain dict from a StripeObject (or a dict already)."""
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(obj)


def _drop_none(params: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in params.items() if v is not None}


class StripeLedgerClient(LedgerClient):
    """LedgerClient backed by the official stripe SDK."""

    def __init__(self, api_key: str, api_version: str = DEFAULT_API_VERSION):
        """
        Initialize with a secret key.

        Args:
            api_key: Stripe secret key (sk_...)
            api_version: API version pinned on every request

        Raises:
            ValueError: If api_key is empty
        """
        if not api_key:
            raise ValueError("api_key is required")

        self._api_key = api_key
        self.api_version = api_version

    @property
    def _request_options(self) -> dict[str, Any]:
        return {"api_key": self._api_key, "stripe_version": self.api_version}

    @contextmanager
    def _translate_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except stripe.StripeError as e:
            message = e.user_message or str(e)
            logger.error(f"Stripe {operation} failed: {message}")
            raise RemoteError(
                message,
                code=getattr(e, "code", None),
                http_status=getattr(e, "http_status", None),
            ) from e

    def _invoice(self, obj: Any) -> Invoice:
        return Invoice.model_validate(_to_dict(obj))

    def _page(self, obj: Any, model: type) -> Page:
        payload = _to_dict(obj)
        return Page[model](
            data=[model.model_validate(_to_dict(item)) for item in payload.get("data", [])],
            has_more=bool(payload.get("has_more", False)),
        )

    # -------------------------------------------------------------------------
    # Invoices
    # -------------------------------------------------------------------------

    def retrieve_invoice(self, invoice_id: str) -> Invoice:
        with self._translate_errors("retrieve invoice"):
            return self._invoice(stripe.Invoice.retrieve(invoice_id, **self._request_options))

    def list_invoices(
        self,
        status: str | None = None,
        limit: int = 20,
        starting_after: str | None = None,
    ) -> Page[Invoice]:
        params = _drop_none({"status": status, "limit": limit, "starting_after": starting_after})
        with self._translate_errors("list invoices"):
            return self._page(stripe.Invoice.list(**params, **self._request_options), Invoice)

    def search_invoices(self, query: str) -> Page[Invoice]:
        with self._translate_errors("search invoices"):
            return self._page(stripe.Invoice.search(query=query, **self._request_options), Invoice)

    def create_invoice(self, params: dict[str, Any]) -> Invoice:
        with self._translate_errors("create invoice"):
            invoice = self._invoice(stripe.Invoice.create(**_drop_none(params), **self._request_options))
        logger.info(f"Created invoice {invoice.id}")
        return invoice

    def update_invoice(self, invoice_id: str, params: dict[str, Any]) -> Invoice:
        with self._translate_errors("update invoice"):
            return self._invoice(
                stripe.Invoice.modify(invoice_id, **_drop_none(params), **self._request_options)
            )

    def create_invoice_item(self, params: dict[str, Any]) -> dict[str, Any]:
        with self._translate_errors("create invoice item"):
            return _to_dict(stripe.InvoiceItem.create(**_drop_none(params), **self._request_options))

    def finalize_invoice(self, invoice_id: str) -> Invoice:
        with self._translate_errors("finalize invoice"):
            return self._invoice(stripe.Invoice.finalize_invoice(invoice_id, **self._request_options))

    def send_invoice(self, invoice_id: str) -> Invoice:
        with self._translate_errors("send invoice"):
            return self._invoice(stripe.Invoice.send_invoice(invoice_id, **self._request_options))

    def pay_invoice(self, invoice_id: str) -> Invoice:
        with self._translate_errors("pay invoice"):
            return self._invoice(stripe.Invoice.pay(invoice_id, **self._request_options))

    def void_invoice(self, invoice_id: str) -> Invoice:
        with self._translate_errors("void invoice"):
            return self._invoice(stripe.Invoice.void_invoice(invoice_id, **self._request_options))

    def mark_uncollectible(self, invoice_id: str) -> Invoice:
        with self._translate_errors("mark invoice uncollectible"):
            return self._invoice(stripe.Invoice.mark_uncollectible(invoice_id, **self._request_options))

    # -------------------------------------------------------------------------
    # Customers
    # -------------------------------------------------------------------------

    def retrieve_customer(self, customer_id: str) -> Customer:
        with self._translate_errors("retrieve customer"):
            return Customer.model_validate(
                _to_dict(stripe.Customer.retrieve(customer_id, **self._request_options))
            )

    def list_customers(
        self,
        limit: int = 20,
        starting_after: str | None = None,
    ) -> Page[Customer]:
        params = _drop_none({"limit": limit, "starting_after": starting_after})
        with self._translate_errors("list customers"):
            return self._page(stripe.Customer.list(**params, **self._request_options), Customer)

    def create_customer(self, params: dict[str, Any]) -> Customer:
        with self._translate_errors("create customer"):
            customer = Customer.model_validate(
                _to_dict(stripe.Customer.create(**params, **self._request_options))
            )
        logger.info(f"Created customer {customer.id}")
        return customer

    def search_customers(self, query: str) -> Page[Customer]:
        with self._translate_errors("search customers"):
            return self._page(stripe.Customer.search(query=query, **self._request_options), Customer)

    # -------------------------------------------------------------------------
    # Catalog / account
    # -------------------------------------------------------------------------

    def list_prices(
        self,
        active: bool | None = True,
        limit: int = 100,
        expand_product: bool = True,
    ) -> Page[Price]:
        params = _drop_none({
            "active": active,
            "limit": limit,
            "expand": ["data.product"] if expand_product else None,
        })
        with self._translate_errors("list prices"):
            return self._page(stripe.Price.list(**params, **self._request_options), Price)

    def retrieve_balance(self) -> dict[str, Any]:
        with self._translate_errors("retrieve balance"):
            return _to_dict(stripe.Balance.retrieve(**self._request_options))
