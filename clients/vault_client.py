"""
HashiCorp Vault client holding the Stripe secret key.

AppRole login, KV v2 engine. Every path is forced under the 'invoicedesk/'
prefix and may not climb out of it.
"""

import logging
import os
from contextlib import contextmanager

import hvac
from hvac.exceptions import Forbidden, InvalidPath, Unauthorized, VaultError

logger = logging.getLogger(__name__)

_SECRET_PREFIX = "invoicedesk"


def _scoped(path: str) -> str:
    parts = [p for p in path.strip("/").split("/") if p]
    if not parts or any(p in (".", "..") for p in parts):
        raise ValueError(f"Invalid secret path '{path}'")
    return "/".join([_SECRET_PREFIX, *parts])


@contextmanager
def _access(verb: str, full_path: str):
    """Turn Vault auth failures into PermissionError naming the operation."""
    try:
        yield
    except (Unauthorized, Forbidden) as e:
        logger.error(f"{verb} denied to secret {full_path}: {e}")
        raise PermissionError(f"{verb} denied to secret '{full_path}': {e}") from e


class VaultClient:
    """KV v2 access scoped to the invoice desk prefix. Configuration comes from VAULT_* env vars."""

    def __init__(
        self,
        vault_addr: str | None = None,
        vault_namespace: str | None = None,
        mount_point: str | None = None,
    ):
        self.vault_addr = vault_addr or os.getenv("VAULT_ADDR")
        self.vault_namespace = vault_namespace or os.getenv("VAULT_NAMESPACE")
        self.mount_point = mount_point or os.getenv("VAULT_KV_MOUNT", "secret")
        role_id = os.getenv("VAULT_ROLE_ID")
        secret_id = os.getenv("VAULT_SECRET_ID")

        if not self.vault_addr:
            raise ValueError("VAULT_ADDR environment variable is required")
        if not role_id or not secret_id:
            raise ValueError("VAULT_ROLE_ID and VAULT_SECRET_ID environment variables are required")

        client_kwargs = {"url": self.vault_addr}
        if self.vault_namespace:
            client_kwargs["namespace"] = self.vault_namespace
        self.client = hvac.Client(**client_kwargs)

        try:
            login = self.client.auth.approle.login(role_id=role_id, secret_id=secret_id)
        except VaultError as e:
            logger.error(f"AppRole authentication failed: {e}")
            raise PermissionError(f"AppRole authentication failed: {e}") from e
        self.client.token = login["auth"]["client_token"]

        if not self.client.is_authenticated():
            raise PermissionError("Vault authentication failed")

        logger.info(f"Vault client ready: {self.vault_addr} (mount '{self.mount_point}')")

    @property
    def _kv(self):
        return self.client.secrets.kv.v2

    def get_secret(self, path: str, field: str) -> str:
        """
        Read one field of a secret.

        Raises:
            PermissionError: Secret missing or access denied.
            KeyError: Secret exists but lacks the field.
        """
        full_path = _scoped(path)
        with _access("Read", full_path):
            try:
                response = self._kv.read_secret_version(
                    path=full_path, mount_point=self.mount_point, raise_on_deleted_version=True
                )
            except InvalidPath as e:
                raise PermissionError(f"Secret path '{full_path}' not found in Vault") from e

        data = response["data"]["data"]
        if field not in data:
            raise KeyError(
                f"Field '{field}' not found in secret '{full_path}'. "
                f"Available: {', '.join(sorted(data))}"
            )
        return data[field]

    def put_secret(self, path: str, field: str, value: str) -> None:
        """Write one field, keeping the secret's other fields. Creates the secret on first write."""
        full_path = _scoped(path)
        with _access("Write", full_path):
            try:
                self._kv.patch(path=full_path, secret={field: value}, mount_point=self.mount_point)
            except InvalidPath:
                self._kv.create_or_update_secret(
                    path=full_path, secret={field: value}, mount_point=self.mount_point
                )
        logger.info(f"Secret field '{field}' written to {full_path}")

    def delete_secret(self, path: str) -> None:
        """Remove every version of a secret. Missing secrets are ignored."""
        full_path = _scoped(path)
        with _access("Delete", full_path):
            try:
                self._kv.delete_metadata_and_all_versions(path=full_path, mount_point=self.mount_point)
            except InvalidPath:
                return
        logger.info(f"Secret {full_path} deleted")
