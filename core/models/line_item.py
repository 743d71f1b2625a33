"""Invoice creation models.

An invoice is created as an empty shell, then line items are attached one
by one. Custom items carry a decimal amount in major units which is
converted to integer minor units on submission; price items reference a
catalog price whose currency wins over the form's currency.
"""

from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from core.models.invoice import CollectionMethod, Invoice
from core.models.price import Price
from utils.money import parse_amount


class LineItemMode(str, Enum):
    """Where a line item's amount comes from."""

    CUSTOM = "custom"  # Free-text description + typed amount
    PRICE = "price"    # Catalog price reference


class InvoiceLineDraft(BaseModel):
    """One row of the invoice form."""

    mode: LineItemMode = LineItemMode.CUSTOM
    description: str | None = Field(None, max_length=500)
    amount: Decimal | None = None
    quantity: int = Field(1, ge=1)
    price: Price | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def parse_typed_amount(cls, value: Any) -> Decimal | None:
        return parse_amount(value)

    @field_validator("quantity", mode="before")
    @classmethod
    def default_quantity(cls, value: Any) -> Any:
        # Blank or zero quantity fields mean one
        if value in (None, "", 0, "0"):
            return 1
        return value

    @field_validator("description", mode="before")
    @classmethod
    def blank_description(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def price_currency(self) -> str | None:
        if self.mode == LineItemMode.PRICE and self.price is not None:
            return self.price.currency
        return None


class InvoiceCreate(BaseModel):
    """Data required to create an invoice with its line items."""

    customer_id: str = Field(..., min_length=1)
    description: str | None = Field(None, max_length=5000)
    collection_method: CollectionMethod = CollectionMethod.SEND_INVOICE
    # None means "use the configured default"
    days_until_due: int | None = Field(None, ge=1, le=365)
    currency: str | None = Field(None, min_length=3, max_length=3)
    metadata: dict[str, str] = Field(default_factory=dict)
    line_items: list[InvoiceLineDraft] = Field(default_factory=list)

    @field_validator("currency", mode="before")
    @classmethod
    def lowercase_currency(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() or None
        return value

    def with_defaults(self, currency: str, days_until_due: int) -> "InvoiceCreate":
        """Copy with unset currency and payment terms filled in."""
        return self.model_copy(update={
            "currency": self.currency or currency.lower(),
            "days_until_due": self.days_until_due or days_until_due,
        })


class SkippedLineItem(BaseModel):
    """A draft row that was not attached, and why."""

    index: int
    reason: str


class CreateResult(BaseModel):
    """
    Outcome of invoice creation.

    ``skipped`` rows were blank (no price picked, no positive amount) and
    were ignored on purpose. ``failed`` rows were rejected locally or by the
    ledger; the shell is never rolled back, so the invoice then has fewer
    items than requested.
    """

    invoice: Invoice
    created_item_ids: list[str] = Field(default_factory=list)
    skipped: list[SkippedLineItem] = Field(default_factory=list)
    failed: list[SkippedLineItem] = Field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.failed)
