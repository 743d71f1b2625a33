"""
Credential store for the Stripe secret key.

Results are reported, not raised: the caller decides how to surface a
storage failure. The secret itself never appears in logs.
"""

import logging

from hvac.exceptions import VaultError as HvacVaultError
from pydantic import BaseModel

from clients.vault_client import VaultClient
from core.config import InvoiceDeskConfig

logger = logging.getLogger(__name__)


class CredentialResult(BaseModel):
    """Outcome of a store/retrieve call."""

    success: bool
    data: str | None = None
    error: str | None = None


class CredentialStore:
    """Stores one secret in Vault. The Vault client is created on first use."""

    def __init__(self, path: str, field: str, vault: VaultClient | None = None):
        self._vault = vault
        self.path = path
        self.field = field

    @classmethod
    def from_config(cls, config: InvoiceDeskConfig, vault: VaultClient | None = None) -> "CredentialStore":
        """Store for the Stripe key at the configured Vault location."""
        return cls(config.vault_secret_path, config.vault_secret_field, vault=vault)

    def _client(self) -> VaultClient:
        if self._vault is None:
            self._vault = VaultClient()
        return self._vault

    def store(self, secret: str) -> CredentialResult:
        """Persist the secret, replacing any previous value."""
        if not secret:
            return CredentialResult(success=False, error="Secret must not be empty")

        try:
            self._client().put_secret(self.path, self.field, secret)
        except (ValueError, PermissionError, HvacVaultError) as e:
            logger.error(f"Failed to store credential at {self.path}: {e}")
            return CredentialResult(success=False, error=str(e))

        return CredentialResult(success=True)

    def retrieve(self) -> CredentialResult:
        """
        Read the stored secret.

        A secret that was never stored is a success with ``data=None``.
        """
        try:
            value = self._client().get_secret(self.path, self.field)
        except KeyError:
            return CredentialResult(success=True, data=None)
        except PermissionError as e:
            if "not found" in str(e):
                return CredentialResult(success=True, data=None)
            logger.error(f"Failed to read credential at {self.path}: {e}")
            return CredentialResult(success=False, error=str(e))
        except (ValueError, HvacVaultError) as e:
            logger.error(f"Failed to read credential at {self.path}: {e}")
            return CredentialResult(success=False, error=str(e))

        return CredentialResult(success=True, data=value or None)

    def clear(self) -> CredentialResult:
        """Remove the stored secret."""
        try:
            self._client().delete_secret(self.path)
        except (ValueError, PermissionError, HvacVaultError) as e:
            logger.error(f"Failed to clear credential at {self.path}: {e}")
            return CredentialResult(success=False, error=str(e))

        return CredentialResult(success=True)
