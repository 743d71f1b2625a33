"""Typed exceptions for invoice workflows.

Every failure the controller surfaces carries a stable ``kind`` so callers
can tell a local validation failure from a blocked send from an upstream
rejection without parsing messages.
"""


class InvoiceDeskError(Exception):
    """Base class for all invoice desk errors."""

    kind = "InvoiceDeskError"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# =============================================================================
# VALIDATION: raised before any remote call
# =============================================================================


class ValidationError(InvoiceDeskError):
    """Request is malformed or not allowed in the current state."""

    kind = "ValidationError"


class MixedCurrency(ValidationError):
    """Selected catalog prices disagree on currency."""

    kind = "MixedCurrency"

    def __init__(self, currencies: list[str]):
        self.currencies = currencies
        super().__init__(
            "Selected prices have mixed currencies "
            f"({', '.join(currencies)}). Please choose prices with the same currency."
        )


class UnknownAction(ValidationError):
    """Action name is not one of the invoice actions."""

    kind = "UnknownAction"


class ActionNotPermitted(ValidationError):
    """Action is not permitted for the invoice's current status."""

    kind = "ActionNotPermitted"

    def __init__(self, invoice_id: str, action: str, status: str):
        self.invoice_id = invoice_id
        self.action = action
        self.status = status
        super().__init__(
            f"Action '{action}' is not permitted on invoice {invoice_id} "
            f"in status '{status}'"
        )


# =============================================================================
# PRECONDITIONS: raised by the send preflight before mutating remote state
# =============================================================================


class PreconditionError(InvoiceDeskError):
    """Invoice is not in a state where the requested send can proceed."""

    kind = "PreconditionError"


class NoCustomerAttached(PreconditionError):
    kind = "NoCustomerAttached"

    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__("Invoice has no customer attached.")


class NoCustomerEmail(PreconditionError):
    kind = "NoCustomerEmail"

    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__(
            "Customer has no email. Add an email to the customer before sending."
        )


class WrongCollectionMethod(PreconditionError):
    """Finalized invoice charges automatically; it cannot be switched to email delivery."""

    kind = "WrongCollectionMethod"

    def __init__(self, invoice_id: str, collection_method: str):
        self.invoice_id = invoice_id
        self.collection_method = collection_method
        super().__init__(
            "Invoice is not configured for email (collection_method is "
            f"{collection_method}). Duplicate the invoice as draft and set "
            "collection method to send_invoice."
        )


# =============================================================================
# REMOTE / CONNECTION
# =============================================================================


class RemoteError(InvoiceDeskError):
    """
    The remote ledger rejected or failed a call.

    The upstream message is kept verbatim. Never retried.
    """

    kind = "RemoteError"

    def __init__(self, message: str, code: str | None = None, http_status: int | None = None):
        self.code = code
        self.http_status = http_status
        super().__init__(message)


class NotConnectedError(InvoiceDeskError):
    """No usable API key has been configured."""

    kind = "NotConnectedError"

    def __init__(self, message: str = "Stripe not initialized. Please configure your API key in Settings."):
        super().__init__(message)
