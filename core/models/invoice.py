"""Invoice domain models.

Stripe owns every invoice; these models are read-only views of the ledger's
JSON. Unknown fields are kept so responses pass through untouched.
Amounts are integer minor units (cents, pence) exactly as Stripe sends them.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, field_validator

from utils.timezone import from_unix


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status as reported by the ledger."""

    DRAFT = "draft"
    OPEN = "open"
    PAID = "paid"
    VOID = "void"
    UNCOLLECTIBLE = "uncollectible"


class CollectionMethod(str, Enum):
    """How the ledger collects payment."""

    CHARGE_AUTOMATICALLY = "charge_automatically"
    SEND_INVOICE = "send_invoice"


class InvoiceAction(str, Enum):
    """Actions a user can request on an invoice."""

    FINALIZE = "finalize"
    SEND = "send"
    PAY = "pay"
    VOID = "void"
    MARK_UNCOLLECTIBLE = "mark_uncollectible"

    @classmethod
    def _missing_(cls, value):
        # Buttons and older clients say "uncollectible"
        if value == "uncollectible":
            return cls.MARK_UNCOLLECTIBLE
        return None


def collapse_expanded(value: Any) -> Any:
    """Expanded references arrive as objects; keep only the id."""
    if isinstance(value, dict):
        return value.get("id")
    return value


class Invoice(BaseModel):
    """Invoice as returned by the ledger."""

    id: str
    status: InvoiceStatus
    collection_method: CollectionMethod | None = None
    customer: str | None = None
    customer_email: str | None = None
    customer_name: str | None = None
    last_send_at: int | None = None
    currency: str | None = None
    number: str | None = None
    description: str | None = None
    subtotal: int | None = None
    total: int | None = None
    amount_due: int | None = None
    amount_paid: int | None = None
    hosted_invoice_url: str | None = None
    created: int | None = None
    due_date: int | None = None

    model_config = {"extra": "allow"}

    @field_validator("customer", mode="before")
    @classmethod
    def collapse_customer(cls, value: Any) -> Any:
        return collapse_expanded(value)

    @property
    def is_draft(self) -> bool:
        return self.status == InvoiceStatus.DRAFT

    @property
    def has_been_sent(self) -> bool:
        """Whether the ledger recorded an email dispatch."""
        return self.last_send_at is not None

    @property
    def last_sent_at(self) -> datetime | None:
        """last_send_at as an aware datetime."""
        return from_unix(self.last_send_at)


class SendResult(BaseModel):
    """
    Outcome of a checked send.

    ``sent`` only means the ledger recorded a send timestamp when re-read.
    It does not prove delivery, and False does not prove failure: delivery
    may be recorded later.
    """

    sent: bool
    invoice: Invoice


class ActionResult(BaseModel):
    """Outcome of a controller action: the refreshed, authoritative invoice."""

    action: InvoiceAction
    invoice: Invoice
    sent: bool | None = None
