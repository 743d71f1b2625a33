"""
Domain events for invoice desk.

Immutable event objects published after the ledger confirms a change.
Events carry the refreshed domain object so handlers don't need to re-fetch.

Event Categories:
- InvoiceEvent: Invoice lifecycle (created, action performed, sent)
- CustomerEvent: Customer lifecycle (created)
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class InvoiceDeskEvent:
    """Base class for all domain events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)


# =============================================================================
# INVOICE EVENTS
# =============================================================================


@dataclass(frozen=True)
class InvoiceEvent(InvoiceDeskEvent):
    """Events related to invoice lifecycle."""
    pass


@dataclass(frozen=True)
class InvoiceCreated(InvoiceEvent):
    """Invoice shell created and line items attached (possibly partially)."""
    invoice: Any = None  # Invoice; Any avoids a circular import
    failed_items: int = 0

    @classmethod
    def create(cls, invoice: Any, failed_items: int = 0) -> "InvoiceCreated":
        return cls(invoice=invoice, failed_items=failed_items)


@dataclass(frozen=True)
class InvoiceActionPerformed(InvoiceEvent):
    """The ledger accepted an action; ``invoice`` is the re-read state."""
    action: str = ""
    invoice: Any = None

    @classmethod
    def create(cls, action: str, invoice: Any) -> "InvoiceActionPerformed":
        return cls(action=action, invoice=invoice)


@dataclass(frozen=True)
class InvoiceSent(InvoiceEvent):
    """Send call accepted. ``sent`` is whether the ledger recorded last_send_at."""
    invoice: Any = None
    sent: bool = False

    @classmethod
    def create(cls, invoice: Any, sent: bool) -> "InvoiceSent":
        return cls(invoice=invoice, sent=sent)


# =============================================================================
# CUSTOMER EVENTS
# =============================================================================


@dataclass(frozen=True)
class CustomerEvent(InvoiceDeskEvent):
    """Events related to customer lifecycle."""
    pass


@dataclass(frozen=True)
class CustomerCreated(CustomerEvent):
    """A new customer was created."""
    customer: Any = None

    @classmethod
    def create(cls, customer: Any) -> "CustomerCreated":
        return cls(customer=customer)
