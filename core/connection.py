"""
Stripe connection lifecycle.

Owns the API key and the ledger client built from it. Services never see
the key; they receive the ledger client through ``connection.ledger``.
Only secret keys (``sk_``) produce a connected client.
"""

import logging
from typing import Callable

from clients.credential_store import CredentialResult, CredentialStore
from clients.ledger_client import LedgerClient
from clients.stripe_client import StripeLedgerClient
from core.config import InvoiceDeskConfig
from core.exceptions import NotConnectedError, RemoteError

logger = logging.getLogger(__name__)

_SECRET_KEY_PREFIX = "sk_"

Notifier = Callable[[str, str], None]


def _log_notification(message: str, severity: str) -> None:
    level = logging.ERROR if severity == "error" else logging.INFO
    logger.log(level, message)


class StripeConnection:
    """Loads, stores and validates the API key; hands out the ledger client."""

    def __init__(
        self,
        credential_store: CredentialStore,
        config: InvoiceDeskConfig | None = None,
        client_factory: Callable[..., LedgerClient] = StripeLedgerClient,
        notify: Notifier | None = None,
    ):
        self.credential_store = credential_store
        self.config = config or InvoiceDeskConfig()
        self._client_factory = client_factory
        self._notify = notify or _log_notification
        self._api_key: str | None = None
        self._ledger: LedgerClient | None = None

    @classmethod
    def from_config(
        cls,
        config: InvoiceDeskConfig | None = None,
        notify: Notifier | None = None,
    ) -> "StripeConnection":
        """Connection whose key lives at the configured Vault location."""
        config = config or InvoiceDeskConfig()
        return cls(CredentialStore.from_config(config), config=config, notify=notify)

    @property
    def is_connected(self) -> bool:
        return self._ledger is not None

    @property
    def ledger(self) -> LedgerClient:
        """
        The connected ledger client.

        Raises:
            NotConnectedError: If no valid key has been configured
        """
        if self._ledger is None:
            raise NotConnectedError()
        return self._ledger

    @property
    def masked_key(self) -> str | None:
        """Key suitable for display: prefix and last four characters only."""
        if not self._api_key:
            return None
        prefix = self._api_key[:8] if len(self._api_key) > 12 else self._api_key[:3]
        return f"{prefix}...{self._api_key[-4:]}"

    def _initialize(self, api_key: str | None) -> bool:
        if not api_key or not api_key.startswith(_SECRET_KEY_PREFIX):
            self._ledger = None
            return False

        try:
            self._ledger = self._client_factory(api_key, api_version=self.config.stripe_api_version)
        except ValueError as e:
            logger.error(f"Error initializing Stripe client: {e}")
            self._ledger = None
            self._notify("Invalid API key format", "error")
            return False

        self._notify("Connected to Stripe successfully", "success")
        return True

    def load(self) -> bool:
        """
        Load a previously stored key and connect with it.

        Returns:
            True if a usable key was found and the client built
        """
        result = self.credential_store.retrieve()
        if not result.success:
            logger.error(f"Error loading API key: {result.error}")
            return False

        if not result.data:
            logger.info("No stored API key")
            return False

        self._api_key = result.data
        return self._initialize(result.data)

    def set_api_key(self, api_key: str) -> CredentialResult:
        """
        Store a new key, then connect with it.

        A key that stores fine but is not a secret key leaves the connection
        disconnected; the stored value is still replaced.
        """
        api_key = (api_key or "").strip()
        result = self.credential_store.store(api_key)
        if not result.success:
            self._notify(result.error or "Failed to save API key", "error")
            return result

        self._api_key = api_key
        self._initialize(api_key)
        self._notify("API key saved successfully", "success")
        return result

    def disconnect(self) -> None:
        """Drop the client and forget the stored key."""
        self._ledger = None
        self._api_key = None
        result = self.credential_store.clear()
        if not result.success:
            logger.warning(f"Stored API key could not be cleared: {result.error}")
        self._notify("Disconnected from Stripe", "info")

    def test_connection(self) -> bool:
        """Make one authenticated call. Returns True if the ledger answered."""
        if self._ledger is None:
            self._notify("No Stripe instance available", "error")
            return False

        try:
            self._ledger.retrieve_balance()
        except RemoteError as e:
            self._notify(f"Connection test failed: {e.message}", "error")
            return False

        self._notify("Connection test successful", "success")
        return True
