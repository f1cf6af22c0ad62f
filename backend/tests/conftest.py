"""
Shared test fixtures for PickupDesk tests

Provides the fake Shopify client, a wired pickup service, and an HTTP client
whose pickup service is replaced by the test one.
"""
import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.api.v1.deps import get_pickup_service
from app.core.limiter import limiter
from app.services.location_resolver import LocationConfig, LocationResolver
from app.services.pickup_ledger import PickupLedger
from app.services.pickup_service import PickupService
from tests.factories import (
    FakeShopifyClient,
    STORE_KEYWORD,
    STORE_LOCATION_ID,
    WAREHOUSE_KEYWORD,
    WAREHOUSE_LOCATION_ID,
    reset_sequences,
)

# Disable rate limiting for tests
limiter.enabled = False


@pytest.fixture(autouse=True)
def _reset_sequences():
    reset_sequences()


@pytest.fixture
def fake_shopify():
    return FakeShopifyClient()


@pytest.fixture
def ledger():
    return PickupLedger()


@pytest.fixture
def location_config():
    return LocationConfig(
        store_location_id=STORE_LOCATION_ID,
        warehouse_location_id=WAREHOUSE_LOCATION_ID,
        default_location_id=STORE_LOCATION_ID,
        warehouse_keywords=[WAREHOUSE_KEYWORD],
        store_keywords=[STORE_KEYWORD],
    )


@pytest.fixture
def pickup_service(fake_shopify, ledger, location_config):
    """Service with English messages and a short lock wait."""
    return PickupService(
        fake_shopify,
        ledger,
        LocationResolver(location_config, fake_shopify),
        locale="en",
        fulfillment_message="Pickup confirmed by customer",
        lock_timeout=5,
        token_algorithm="sha1",
    )


@pytest.fixture
def client(pickup_service):
    """Create a test client with the pickup service override"""
    app.dependency_overrides[get_pickup_service] = lambda: pickup_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
