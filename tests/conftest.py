"""Pytest configuration and fixtures for the Wholesale Bridge test suite.

Provides:
- Consistent Shopify / catalog settings for every test
- Disabled rate limiting and no-wait retries
- Fresh in-memory stores and an app built around them per test
- Async test client (ASGI transport, no network)
- Signing helpers for OAuth callbacks and webhook bodies
- Mocks for outbound httpx calls (token exchange, Shopify, catalog)
"""

from collections.abc import AsyncGenerator, Callable, Generator
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import fakeredis.aioredis
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from tenacity import wait_none

from wholesale_bridge.core.rate_limit import limiter
from wholesale_bridge.integrations.shopify.client import ShopifyClient
from wholesale_bridge.integrations.shopify.signatures import sign_body, sign_query
from wholesale_bridge.main import create_app
from wholesale_bridge.schemas.oauth import ShopMetadata
from wholesale_bridge.stores.app_config import AppConfigStore
from wholesale_bridge.stores.credentials import InMemoryCredentialStore
from wholesale_bridge.stores.states import InMemoryStateStore

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
SHOPIFY_TEST_API_KEY = "test-shopify-api-key"
SHOPIFY_TEST_API_SECRET = "test-shopify-api-secret"
SHOPIFY_TEST_SHOP = "test.myshopify.com"
SHOPIFY_TEST_TOKEN = "tok_abc"
TEST_APP_URL = "https://bridge.example.com"
CATALOG_TEST_APP_ID = "azan-app-id"
CATALOG_TEST_SECRET_KEY = "azan-secret-key"

# ---------------------------------------------------------------------------
# Disable rate limiting globally for tests
# ---------------------------------------------------------------------------
limiter.enabled = False


@pytest.fixture(autouse=True)
def set_test_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure every test sees the same Shopify and catalog configuration.

    Catalog credentials are blank so tests decide where they come from.
    """
    prefix = "wholesale_bridge.core.config.settings"
    monkeypatch.setattr(f"{prefix}.shopify_api_key", SHOPIFY_TEST_API_KEY)
    monkeypatch.setattr(f"{prefix}.shopify_api_secret", SHOPIFY_TEST_API_SECRET)
    monkeypatch.setattr(f"{prefix}.shopify_webhook_secret", "")
    monkeypatch.setattr(f"{prefix}.app_url", TEST_APP_URL)
    monkeypatch.setattr(f"{prefix}.api_prefix", "/api")
    monkeypatch.setattr(f"{prefix}.shopify_online_tokens", False)
    monkeypatch.setattr(f"{prefix}.embedded_redirect", False)
    monkeypatch.setattr(f"{prefix}.register_webhooks", True)
    monkeypatch.setattr(f"{prefix}.catalog_app_id", "")
    monkeypatch.setattr(f"{prefix}.catalog_secret_key", "")
    monkeypatch.setattr(f"{prefix}.catalog_base_url", "https://catalog.test")


@pytest.fixture(autouse=True)
def no_retry_wait(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tenacity's retry count but skip the backoff sleeps."""
    monkeypatch.setattr(ShopifyClient.get_shop.retry, "wait", wait_none())  # type: ignore[attr-defined]


# ---------------------------------------------------------------------------
# Stores and app
# ---------------------------------------------------------------------------


@pytest.fixture
def credential_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def state_store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def app_config_store() -> AppConfigStore:
    return AppConfigStore()


@pytest.fixture
def fake_redis() -> fakeredis.aioredis.FakeRedis:
    """Provide a fresh fakeredis instance per test."""
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


@pytest.fixture
def app(
    credential_store: InMemoryCredentialStore,
    state_store: InMemoryStateStore,
    app_config_store: AppConfigStore,
) -> FastAPI:
    """Application wired to this test's stores."""
    return create_app(
        credential_store=credential_store,
        state_store=state_store,
        app_config_store=app_config_store,
    )


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async test client talking to the app over ASGI."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ---------------------------------------------------------------------------
# Signing helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def shopify_oauth_hmac() -> Callable[[dict[str, str]], str]:
    """Generate a valid Shopify OAuth callback HMAC for query params.

    Usage:
        params = {"code": "abc", "shop": "store.myshopify.com", "state": "nonce123"}
        params["hmac"] = shopify_oauth_hmac(params)
    """

    def _compute(params: dict[str, str]) -> str:
        return sign_query(params, SHOPIFY_TEST_API_SECRET)

    return _compute


@pytest.fixture
def shopify_webhook_headers() -> Callable[..., dict[str, str]]:
    """Generate complete Shopify webhook headers for a body and topic.

    Usage:
        body = b'{"id": 1, "financial_status": "paid", "line_items": []}'
        headers = shopify_webhook_headers(body, "orders/updated")
    """

    def _headers(
        body: bytes, topic: str = "orders/updated", shop: str = SHOPIFY_TEST_SHOP
    ) -> dict[str, str]:
        return {
            "X-Shopify-Hmac-Sha256": sign_body(body, SHOPIFY_TEST_API_SECRET),
            "X-Shopify-Topic": topic,
            "X-Shopify-Shop-Domain": shop,
            "Content-Type": "application/json",
        }

    return _headers


# ---------------------------------------------------------------------------
# Outbound HTTP mocks
# ---------------------------------------------------------------------------


def make_response(json_data: Any, status_code: int = 200) -> MagicMock:
    """A MagicMock standing in for an httpx.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.is_success = 200 <= status_code < 300
    response.json.return_value = json_data
    response.text = str(json_data)
    response.raise_for_status = MagicMock()
    return response


@pytest.fixture
def mock_shopify_token_exchange() -> Generator[AsyncMock, None, None]:
    """Mock the Shopify OAuth token exchange HTTP call.

    Patches httpx.AsyncClient in oauth.py to return SHOPIFY_TEST_TOKEN.
    """
    with patch("wholesale_bridge.integrations.shopify.oauth.httpx.AsyncClient") as mock_class:
        mock_client = AsyncMock()
        mock_class.return_value.__aenter__.return_value = mock_client
        mock_client.post.return_value = make_response(
            {"access_token": SHOPIFY_TEST_TOKEN, "scope": "read_products,write_products"}
        )
        yield mock_client


@pytest.fixture
def mock_shopify_client() -> Generator[MagicMock, None, None]:
    """Mock the ShopifyClient used by the callback to avoid real API calls."""
    with patch("wholesale_bridge.services.callback.ShopifyClient") as mock_class:
        mock_instance = MagicMock()
        mock_instance.shop_domain = SHOPIFY_TEST_SHOP
        mock_instance.get_shop = AsyncMock(
            return_value=ShopMetadata(
                name="Test Shop", email="owner@example.com", domain=SHOPIFY_TEST_SHOP
            )
        )
        mock_instance.register_webhooks = AsyncMock()
        mock_class.return_value = mock_instance
        yield mock_class


@pytest.fixture
def mock_shopify_http() -> Generator[AsyncMock, None, None]:
    """Mock httpx.AsyncClient for ShopifyClient unit tests."""
    with patch("wholesale_bridge.integrations.shopify.client.httpx.AsyncClient") as mock_class:
        mock_client = AsyncMock()
        mock_class.return_value.__aenter__.return_value = mock_client
        mock_client.get.return_value = make_response({"shop": {"name": "Test Shop"}})
        mock_client.post.return_value = make_response({"product": {"id": 1}}, status_code=201)
        yield mock_client


@pytest.fixture
def mock_catalog_http() -> Generator[AsyncMock, None, None]:
    """Mock httpx.AsyncClient for the wholesale catalog client."""
    with patch("wholesale_bridge.integrations.catalog.client.httpx.AsyncClient") as mock_class:
        mock_client = AsyncMock()
        mock_class.return_value.__aenter__.return_value = mock_client
        mock_client.request.return_value = make_response({"success": True, "data": []})
        yield mock_client
