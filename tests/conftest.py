"""Shared test fixtures for checkout test suite."""

import pytest

# Reset vault client singleton so tests never reuse a real Vault session
import clients.vault_client as vault_module

from clients.payment_client import PaymentProviderClient
from core.config import CheckoutConfig, ENV_VARS
from core.event_bus import EventBus
from core.status_store import InMemoryStatusStore


# =============================================================================
# PROVIDER CONSTANTS
# =============================================================================

API_URL = "https://provider.test"
API_TOKEN = "test-api-token"
STORE_ID = "store_123"
WEBHOOK_SECRET = "test-webhook-secret"


@pytest.fixture(autouse=True)
def reset_vault_state():
    """Ensure no cached Vault client or secrets leak between tests."""
    vault_module._vault_client_instance = None
    vault_module._secret_cache.clear()
    yield
    vault_module._vault_client_instance = None
    vault_module._secret_cache.clear()


@pytest.fixture
def clean_env(monkeypatch):
    """
    Remove every checkout and Vault variable from the environment.

    Each variable is set then deleted so monkeypatch also removes anything
    a .env file adds during the test.
    """
    for env_var in [*ENV_VARS.values(), "VAULT_ADDR", "VAULT_NAMESPACE", "VAULT_ROLE_ID", "VAULT_SECRET_ID"]:
        monkeypatch.setenv(env_var, "placeholder")
        monkeypatch.delenv(env_var)
    return monkeypatch


# =============================================================================
# CONFIG & CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def invoices_url() -> str:
    """Store-scoped invoices endpoint on the fake provider."""
    return f"{API_URL}/api/v1/stores/{STORE_ID}/invoices"


@pytest.fixture
def config() -> CheckoutConfig:
    """Fully configured checkout, default polling and fallback policy."""
    return CheckoutConfig(
        api_url=API_URL,
        api_token=API_TOKEN,
        store_id=STORE_ID,
        webhook_secret=WEBHOOK_SECRET,
    )


@pytest.fixture
def provider_client(config) -> PaymentProviderClient:
    return PaymentProviderClient(
        base_url=config.api_url,
        api_token=config.api_token,
        store_id=config.store_id,
    )


@pytest.fixture
def store() -> InMemoryStatusStore:
    return InMemoryStatusStore()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def sleeps() -> list:
    """Records requested sleep durations instead of sleeping."""
    return []


@pytest.fixture
def fake_sleep(sleeps):
    return sleeps.append
