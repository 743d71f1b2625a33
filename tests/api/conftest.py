"""API test fixtures: TestClient over an app wired to the in-memory ledger."""

from unittest.mock import Mock

import pytest
from starlette.testclient import TestClient

from clients.credential_store import CredentialResult, CredentialStore


# =============================================================================
# CONNECTION FIXTURES
# =============================================================================


@pytest.fixture
def credential_store():
    store = Mock(spec=CredentialStore)
    store.retrieve.return_value = CredentialResult(success=True, data="sk_test_1234567890abcd")
    store.store.return_value = CredentialResult(success=True)
    store.clear.return_value = CredentialResult(success=True)
    return store


@pytest.fixture
def notices():
    return []


@pytest.fixture
def connection(credential_store, ledger, notices):
    """Connection whose client factory hands out the in-memory ledger."""
    from core.connection import StripeConnection

    conn = StripeConnection(
        credential_store,
        client_factory=lambda api_key, api_version: ledger,
        notify=lambda message, severity: notices.append((message, severity)),
    )
    conn.load()
    return conn


# =============================================================================
# APP & CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def app(connection, event_bus, notices):
    """FastAPI app with error handlers, and data/actions routes."""
    from api.app import create_app

    return create_app(
        connection,
        event_bus=event_bus,
        notify=lambda message, severity: notices.append((message, severity)),
    )


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def disconnected_client(credential_store, event_bus):
    """Client for an app with no stored key."""
    from api.app import create_app
    from core.connection import StripeConnection

    credential_store.retrieve.return_value = CredentialResult(success=True, data=None)
    conn = StripeConnection(credential_store)
    conn.load()
    return TestClient(create_app(conn, event_bus=event_bus), raise_server_exceptions=False)
