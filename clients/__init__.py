# Infrastructure clients
from clients.vault_client import VaultClient
from clients.credential_store import CredentialStore, CredentialResult
from clients.ledger_client import LedgerClient
from clients.stripe_client import StripeLedgerClient
