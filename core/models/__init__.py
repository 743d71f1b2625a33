"""Core domain models."""

from core.models.customer import Customer, CustomerCreate, CustomerAddress
from core.models.invoice import (
    Invoice, InvoiceStatus, CollectionMethod, InvoiceAction,
    SendResult, ActionResult,
)
from core.models.line_item import (
    LineItemMode, InvoiceLineDraft, InvoiceCreate, SkippedLineItem, CreateResult,
)
from core.models.price import Price
from core.models.page import Page

__all__ = [
    # Customer
    "Customer", "CustomerCreate", "CustomerAddress",
    # Invoice
    "Invoice", "InvoiceStatus", "CollectionMethod", "InvoiceAction",
    "SendResult", "ActionResult",
    # Creation
    "LineItemMode", "InvoiceLineDraft", "InvoiceCreate", "SkippedLineItem", "CreateResult",
    # Catalog
    "Price",
    # Listing
    "Page",
]
