"""
Invoice action controller.

Decides which actions are valid for an invoice's status, runs the send
preflight, performs the remote mutation, then re-reads the invoice.

Every action is two-phase: mutate (the ledger acknowledges) then refresh
(the ledger's authoritative state). The ledger is eventually consistent,
so the acknowledgement is never used as the new state and the refresh is
never assumed to reflect every side effect (see SendResult.sent).
"""

import logging
import threading
from contextlib import contextmanager

from clients.ledger_client import LedgerClient
from core.event_bus import EventBus
from core.events import InvoiceActionPerformed, InvoiceSent
from core.exceptions import (
    ActionNotPermitted,
    NoCustomerAttached,
    NoCustomerEmail,
    UnknownAction,
    WrongCollectionMethod,
)
from core.models import (
    ActionResult,
    CollectionMethod,
    Invoice,
    InvoiceAction,
    InvoiceStatus,
    SendResult,
)

logger = logging.getLogger(__name__)


# Draft permits send: the preflight switches a draft to send_invoice first.
PERMITTED_ACTIONS: dict[InvoiceStatus, frozenset[InvoiceAction]] = {
    InvoiceStatus.DRAFT: frozenset({
        InvoiceAction.FINALIZE,
        InvoiceAction.SEND,
        InvoiceAction.VOID,
    }),
    InvoiceStatus.OPEN: frozenset({
        InvoiceAction.SEND,
        InvoiceAction.PAY,
        InvoiceAction.VOID,
        InvoiceAction.MARK_UNCOLLECTIBLE,
    }),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.VOID: frozenset(),
    InvoiceStatus.UNCOLLECTIBLE: frozenset(),
}

_unmapped = set(InvoiceStatus) - set(PERMITTED_ACTIONS)
if _unmapped:
    raise RuntimeError(f"No action table entry for statuses: {sorted(s.value for s in _unmapped)}")


def allowed_actions(status: InvoiceStatus) -> frozenset[InvoiceAction]:
    """Actions permitted for an invoice in ``status``."""
    return PERMITTED_ACTIONS[status]


def is_terminal(status: InvoiceStatus) -> bool:
    """Whether no further action can be taken from ``status``."""
    return not PERMITTED_ACTIONS[status]


def coerce_action(action: InvoiceAction | str) -> InvoiceAction:
    """
    Parse an action name.

    Raises:
        UnknownAction: If the name is not an invoice action
    """
    try:
        return InvoiceAction(action)
    except ValueError:
        valid = ", ".join(a.value for a in InvoiceAction)
        raise UnknownAction(f"Unknown invoice action '{action}'. Valid actions: {valid}")


class _InvoiceLock:
    """A lock plus the number of callers holding or waiting on it."""

    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class InvoiceActionService:
    """
    Applies user-requested actions to invoices held by the ledger.

    Never computes a new status locally: every successful call returns the
    invoice as re-read from the ledger, and callers replace their cached
    copy with it. Calls for the same invoice id are serialized. Events are
    published after the invoice's lock is released, so subscribers may act
    on the same invoice again.
    """

    def __init__(self, ledger: LedgerClient, event_bus: EventBus | None = None):
        self.ledger = ledger
        self.event_bus = event_bus or EventBus()
        # Entries exist only while some caller holds or waits on them
        self._locks: dict[str, _InvoiceLock] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _serialized(self, invoice_id: str):
        with self._locks_guard:
            entry = self._locks.get(invoice_id)
            if entry is None:
                entry = self._locks[invoice_id] = _InvoiceLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[invoice_id]

    # -------------------------------------------------------------------------
    # Two-phase protocol
    # -------------------------------------------------------------------------

    def _mutate(self, action: InvoiceAction, invoice_id: str) -> Invoice:
        """Phase one: ask the ledger to act. Returns its acknowledgement."""
        if action == InvoiceAction.FINALIZE:
            return self.ledger.finalize_invoice(invoice_id)
        if action == InvoiceAction.SEND:
            return self.ledger.send_invoice(invoice_id)
        if action == InvoiceAction.PAY:
            return self.ledger.pay_invoice(invoice_id)
        if action == InvoiceAction.VOID:
            return self.ledger.void_invoice(invoice_id)
        if action == InvoiceAction.MARK_UNCOLLECTIBLE:
            return self.ledger.mark_uncollectible(invoice_id)
        raise UnknownAction(f"No mutation for action '{action}'")

    def _refresh(self, invoice_id: str) -> Invoice:
        """Phase two: re-read the authoritative invoice."""
        return self.ledger.retrieve_invoice(invoice_id)

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    def request_action(self, invoice_id: str, action: InvoiceAction | str) -> ActionResult:
        """
        Perform an action on an invoice.

        Args:
            invoice_id: Ledger invoice id
            action: InvoiceAction or its name

        Returns:
            ActionResult with the re-read invoice (and ``sent`` for send)

        Raises:
            UnknownAction: Action name not recognized
            ActionNotPermitted: Action not valid for the invoice's current status
            PreconditionError: Send preflight failed (send only)
            RemoteError: Ledger rejected a call
        """
        action = coerce_action(action)
        send_result: SendResult | None = None

        with self._serialized(invoice_id):
            current = self.ledger.retrieve_invoice(invoice_id)
            if action not in allowed_actions(current.status):
                raise ActionNotPermitted(invoice_id, action.value, current.status.value)

            if action == InvoiceAction.SEND:
                send_result = self._send_with_checks(invoice_id)
                result = ActionResult(action=action, invoice=send_result.invoice, sent=send_result.sent)
            else:
                ack = self._mutate(action, invoice_id)
                logger.info(f"Ledger acknowledged {action.value} on {invoice_id} (status={ack.status.value})")
                result = ActionResult(action=action, invoice=self._refresh(invoice_id))

        logger.info(
            f"Invoice {invoice_id} {action.value}: "
            f"{current.status.value} -> {result.invoice.status.value}"
        )
        if send_result is not None:
            self._publish_sent(send_result)
        self.event_bus.publish(InvoiceActionPerformed.create(action=action.value, invoice=result.invoice))
        return result

    def send_with_checks(self, invoice_id: str) -> SendResult:
        """
        Validate prerequisites, then send an invoice by email.

        Steps, in order:
        1. Re-fetch the invoice (a caller's copy may be stale).
        2. Require a customer.
        3. Resolve an email: the invoice's cached customer_email, else the
           customer record's email.
        4. Require collection_method send_invoice. A draft is switched over;
           anything else is blocked since finalized invoices cannot change it.
        5. Send, then re-fetch and report whether last_send_at is set.

        Raises:
            NoCustomerAttached: Invoice has no customer
            NoCustomerEmail: No email on the invoice or the customer
            WrongCollectionMethod: Finalized invoice charges automatically
            RemoteError: Ledger rejected a call
        """
        with self._serialized(invoice_id):
            result = self._send_with_checks(invoice_id)
        self._publish_sent(result)
        return result

    def _publish_sent(self, result: SendResult) -> None:
        self.event_bus.publish(InvoiceSent.create(invoice=result.invoice, sent=result.sent))

    def _send_with_checks(self, invoice_id: str) -> SendResult:
        invoice = self.ledger.retrieve_invoice(invoice_id)

        if not invoice.customer:
            raise NoCustomerAttached(invoice_id)

        email = invoice.customer_email
        if not email:
            customer = self.ledger.retrieve_customer(invoice.customer)
            email = customer.email
        if not email:
            raise NoCustomerEmail(invoice_id)

        if invoice.collection_method != CollectionMethod.SEND_INVOICE:
            method = invoice.collection_method.value if invoice.collection_method else "unset"
            if not invoice.is_draft:
                raise WrongCollectionMethod(invoice_id, method)
            logger.info(f"Switching draft {invoice_id} from {method} to send_invoice")
            self.ledger.update_invoice(
                invoice_id, {"collection_method": CollectionMethod.SEND_INVOICE.value}
            )

        self._mutate(InvoiceAction.SEND, invoice_id)
        updated = self._refresh(invoice_id)
        return SendResult(sent=updated.last_send_at is not None, invoice=updated)
