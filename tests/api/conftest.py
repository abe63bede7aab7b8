"""API test fixtures: the real app wired to an in-memory store and a mocked provider."""

import pytest
from starlette.testclient import TestClient

from core.config import CheckoutConfig
from core.status_store import InMemoryStatusStore
from main import build_services, create_app


@pytest.fixture
def services(config, store, fake_sleep):
    return build_services(config, store=store, sleep=fake_sleep)


@pytest.fixture
def app(config, services):
    return create_app(config, services=services)


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def unconfigured_client(fake_sleep):
    """App with no provider credentials and no webhook secret."""
    config = CheckoutConfig()
    services = build_services(config, store=InMemoryStatusStore(), sleep=fake_sleep)
    return TestClient(create_app(config, services=services), raise_server_exceptions=False)
