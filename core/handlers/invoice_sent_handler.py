"""
Handler for InvoiceSent events.

Stripe can accept a send call without recording last_send_at (account email
settings, delayed delivery). Surface that as a warning; never retry.
"""

import logging
from typing import Callable

from core.events import InvoiceSent

logger = logging.getLogger(__name__)

UNSENT_WARNING = "Invoice sent call succeeded but last_send_at is empty; check email settings."


def handle_invoice_sent(notify: Callable[[str, str], None] | None = None) -> Callable:
    """
    Factory that returns an InvoiceSent handler.

    Args:
        notify: Optional callback taking (message, severity) for user-facing notices

    Returns:
        Handler callable that warns when the ledger shows no send timestamp
    """

    def handler(event: InvoiceSent):
        if event.sent:
            logger.info(f"Invoice {event.invoice.id} emailed (last_send_at={event.invoice.last_send_at})")
            return

        logger.warning(f"{UNSENT_WARNING} (invoice {event.invoice.id})")
        if notify is not None:
            notify(UNSENT_WARNING, "warning")

    return handler
