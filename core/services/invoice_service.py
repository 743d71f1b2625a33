"""
Invoice service for creation, lookup and search.

Invoices are created as an empty shell and then line items are attached one
at a time. Item failures are logged and recorded on the result; the shell is
never rolled back, so an invoice can end up with fewer items than requested.
"""

import logging
from typing import Any

from clients.ledger_client import LedgerClient
from core.config import InvoiceDeskConfig
from core.event_bus import EventBus
from core.events import InvoiceCreated
from core.exceptions import MixedCurrency, RemoteError
from core.models import (
    CollectionMethod,
    CreateResult,
    Invoice,
    InvoiceCreate,
    InvoiceLineDraft,
    InvoiceStatus,
    LineItemMode,
    Page,
    SkippedLineItem,
)
from utils.money import to_minor_units

logger = logging.getLogger(__name__)


def resolve_currency(data: InvoiceCreate) -> str | None:
    """
    Pick the invoice currency.

    Catalog prices carry their own currency and win over the form's
    currency. All selected prices must agree. Without prices this is the
    form currency, which is None until defaults are applied.

    Raises:
        MixedCurrency: If selected prices disagree
    """
    price_currencies = [
        draft.price_currency.lower()
        for draft in data.line_items
        if draft.price_currency
    ]
    if not price_currencies:
        return data.currency

    distinct = sorted(set(price_currencies))
    if len(distinct) > 1:
        raise MixedCurrency(distinct)
    return price_currencies[0]


class InvoiceService:
    """Service for invoice operations."""

    def __init__(
        self,
        ledger: LedgerClient,
        event_bus: EventBus | None = None,
        config: InvoiceDeskConfig | None = None,
    ):
        self.ledger = ledger
        self.event_bus = event_bus or EventBus()
        self.config = config or InvoiceDeskConfig()

    @property
    def page_size(self) -> int:
        return self.config.page_size

    def _shell_params(self, data: InvoiceCreate, currency: str) -> dict[str, Any]:
        params: dict[str, Any] = {
            "customer": data.customer_id,
            "collection_method": data.collection_method.value,
            "currency": currency,
            "auto_advance": True,
        }
        if data.description:
            params["description"] = data.description
        if data.collection_method == CollectionMethod.SEND_INVOICE and data.days_until_due:
            params["days_until_due"] = data.days_until_due
        if data.metadata:
            params["metadata"] = data.metadata
        return params

    def _item_params(
        self, invoice: Invoice, draft: InvoiceLineDraft, currency: str
    ) -> dict[str, Any] | None:
        """Build invoice item params, or None if the row is blank."""
        params: dict[str, Any] = {
            "customer": invoice.customer,
            "invoice": invoice.id,
            "quantity": draft.quantity,
        }
        if draft.description:
            params["description"] = draft.description

        if draft.mode == LineItemMode.PRICE:
            if draft.price is None or not draft.price.id:
                return None
            params["pricing"] = {"price": draft.price.id}
            return params

        if draft.amount is None or draft.amount <= 0:
            return None
        params["unit_amount_decimal"] = str(to_minor_units(draft.amount))
        params["currency"] = currency
        return params

    def create(self, data: InvoiceCreate) -> CreateResult:
        """
        Create an invoice and attach its line items.

        Args:
            data: Invoice form data

        Returns:
            CreateResult with the re-read invoice and per-item outcomes

        Raises:
            MixedCurrency: Selected prices disagree (raised before any remote call)
            RemoteError: The shell could not be created
        """
        data = data.with_defaults(self.config.default_currency, self.config.default_days_until_due)
        currency = resolve_currency(data)

        shell = self.ledger.create_invoice(self._shell_params(data, currency))
        logger.info(f"Created invoice shell {shell.id} for {data.customer_id} ({currency})")

        created_ids: list[str] = []
        skipped: list[SkippedLineItem] = []
        failed: list[SkippedLineItem] = []

        for index, draft in enumerate(data.line_items):
            price_currency = draft.price_currency
            if price_currency and price_currency.lower() != currency:
                reason = f"Price currency {price_currency} does not match invoice currency {currency}"
                logger.warning(f"Line item {index} on {shell.id}: {reason}")
                failed.append(SkippedLineItem(index=index, reason=reason))
                continue

            try:
                params = self._item_params(shell, draft, currency)
            except (ValueError, ArithmeticError) as e:
                logger.error(f"Line item {index} on {shell.id} has an unusable amount: {e}")
                failed.append(SkippedLineItem(index=index, reason=f"invalid amount: {e}"))
                continue

            if params is None:
                reason = "no price selected" if draft.mode == LineItemMode.PRICE else "amount not positive"
                skipped.append(SkippedLineItem(index=index, reason=reason))
                continue

            try:
                item = self.ledger.create_invoice_item(params)
            except RemoteError as e:
                logger.error(f"Error creating line item {index} on {shell.id}: {e.message}")
                failed.append(SkippedLineItem(index=index, reason=e.message))
                continue

            created_ids.append(item.get("id", ""))

        invoice = self.ledger.retrieve_invoice(shell.id)

        if failed:
            logger.warning(
                f"Invoice {invoice.id} created with {len(failed)} of "
                f"{len(data.line_items)} line item(s) missing"
            )

        self.event_bus.publish(InvoiceCreated.create(invoice=invoice, failed_items=len(failed)))

        return CreateResult(
            invoice=invoice,
            created_item_ids=created_ids,
            skipped=skipped,
            failed=failed,
        )

    def get(self, invoice_id: str) -> Invoice:
        """Fetch one invoice. Raises RemoteError if the ledger has no such id."""
        return self.ledger.retrieve_invoice(invoice_id)

    def list(
        self,
        status: InvoiceStatus | str | None = None,
        limit: int | None = None,
        starting_after: str | None = None,
    ) -> Page[Invoice]:
        """
        List invoices newest first.

        Args:
            status: Optional status filter
            limit: Page size (defaults to the configured page size)
            starting_after: Cursor: id of the last invoice on the previous page
        """
        if status is not None:
            status = InvoiceStatus(status).value
        return self.ledger.list_invoices(
            status=status,
            limit=limit or self.page_size,
            starting_after=starting_after,
        )

    def search(self, term: str | None) -> Page[Invoice]:
        """Search by invoice number or customer id. Blank terms list instead."""
        term = (term or "").strip()
        if not term:
            return self.list()

        escaped = term.replace('"', '\\"')
        return self.ledger.search_invoices(f'number:"{escaped}" OR customer:"{escaped}"')
