"""Tests for CredentialStore."""

from unittest.mock import Mock

import pytest
from hvac.exceptions import VaultDown

from clients.vault_client import VaultClient


@pytest.fixture
def vault():
    return Mock(spec=VaultClient)


@pytest.fixture
def store(vault):
    from clients.credential_store import CredentialStore

    from core.config import InvoiceDeskConfig

    return CredentialStore.from_config(InvoiceDeskConfig(), vault=vault)


class TestStore:

    def test_store_writes_field(self, store, vault):
        result = store.store("sk_test_123")

        assert result.success
        vault.put_secret.assert_called_once_with("stripe", "secret_key", "sk_test_123")

    def test_empty_secret_rejected(self, store, vault):
        result = store.store("")

        assert not result.success
        vault.put_secret.assert_not_called()

    def test_vault_failure_reported(self, store, vault):
        vault.put_secret.side_effect = PermissionError("Write denied to secret 'invoicedesk/stripe'")

        result = store.store("sk_test_123")

        assert not result.success
        assert "Write denied" in result.error


class TestRetrieve:

    def test_returns_stored_secret(self, store, vault):
        vault.get_secret.return_value = "sk_test_123"

        result = store.retrieve()

        assert result.success
        assert result.data == "sk_test_123"

    def test_missing_path_is_success_without_data(self, store, vault):
        vault.get_secret.side_effect = PermissionError("Secret path 'invoicedesk/stripe' not found in Vault")

        result = store.retrieve()

        assert result.success
        assert result.data is None

    def test_missing_field_is_success_without_data(self, store, vault):
        vault.get_secret.side_effect = KeyError("Field 'secret_key' not found")

        result = store.retrieve()

        assert result.success
        assert result.data is None

    def test_access_denied_is_failure(self, store, vault):
        vault.get_secret.side_effect = PermissionError("Read denied to secret 'invoicedesk/stripe': permission denied")

        result = store.retrieve()

        assert not result.success
        assert "Read denied" in result.error

    def test_vault_down_is_failure(self, store, vault):
        vault.get_secret.side_effect = VaultDown("sealed")

        result = store.retrieve()

        assert not result.success


class TestClear:

    def test_clear_deletes_secret(self, store, vault):
        assert store.clear().success
        vault.delete_secret.assert_called_once_with("stripe")

    def test_location_from_config(self, vault):
        from clients.credential_store import CredentialStore
        from core.config import InvoiceDeskConfig

        config = InvoiceDeskConfig(vault_secret_path="stripe-live", vault_secret_field="key")
        store = CredentialStore.from_config(config, vault=vault)
        store.store("sk_live_1")

        vault.put_secret.assert_called_once_with("stripe-live", "key", "sk_live_1")
