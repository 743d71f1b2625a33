"""
Handler for InvoiceCreated events.

Line item failures do not roll back the invoice shell, so a created invoice
may be missing rows. Flag it so someone looks at the draft before sending.
"""

import logging
from typing import Callable

from core.events import InvoiceCreated

logger = logging.getLogger(__name__)


def handle_invoice_created(notify: Callable[[str, str], None] | None = None) -> Callable:
    """Factory that returns an InvoiceCreated handler."""

    def handler(event: InvoiceCreated):
        if not event.failed_items:
            return

        message = (
            f"Invoice {event.invoice.id} was created with {event.failed_items} "
            "line item(s) missing. Review the draft before finalizing."
        )
        logger.warning(message)
        if notify is not None:
            notify(message, "warning")

    return handler
