"""Tests for credential, OAuth state and app configuration stores.

Covers:
- InMemoryCredentialStore / RedisCredentialStore (rotation, delete, listing)
- Token encryption at rest in Redis
- InMemoryStateStore / RedisStateStore (single use, expiry)
- AppConfigStore masking
"""

import asyncio
import json
from datetime import UTC, datetime

import fakeredis.aioredis
import pytest

from wholesale_bridge.core.encryption import decrypt_token
from wholesale_bridge.schemas.catalog import AppConfig
from wholesale_bridge.schemas.oauth import AuthorizationState, ShopCredential
from wholesale_bridge.stores.app_config import AppConfigStore, mask_secret
from wholesale_bridge.stores.credentials import (
    CredentialStore,
    InMemoryCredentialStore,
    RedisCredentialStore,
)
from wholesale_bridge.stores.states import (
    AuthorizationStateStore,
    InMemoryStateStore,
    RedisStateStore,
)
from tests.conftest import SHOPIFY_TEST_SHOP

ENCRYPTION_KEY = "test-encryption-key"


@pytest.fixture(params=["memory", "redis"])
def any_credential_store(
    request: pytest.FixtureRequest, fake_redis: fakeredis.aioredis.FakeRedis
) -> CredentialStore:
    if request.param == "redis":
        return RedisCredentialStore(fake_redis, ENCRYPTION_KEY)
    return InMemoryCredentialStore()


@pytest.fixture(params=["memory", "redis"])
def any_state_store(
    request: pytest.FixtureRequest, fake_redis: fakeredis.aioredis.FakeRedis
) -> AuthorizationStateStore:
    if request.param == "redis":
        return RedisStateStore(fake_redis)
    return InMemoryStateStore()


# ---------------------------------------------------------------------------
# Credential stores
# ---------------------------------------------------------------------------


class TestCredentialStore:
    async def test_get_missing_shop(self, any_credential_store: CredentialStore) -> None:
        assert await any_credential_store.get(SHOPIFY_TEST_SHOP) is None
        assert await any_credential_store.has(SHOPIFY_TEST_SHOP) is False
        assert await any_credential_store.get_token(SHOPIFY_TEST_SHOP) is None

    async def test_set_then_get(self, any_credential_store: CredentialStore) -> None:
        issued = datetime(2026, 1, 1, tzinfo=UTC)
        await any_credential_store.set(
            ShopCredential(
                shop_domain=SHOPIFY_TEST_SHOP,
                access_token="tok_abc",
                scope="read_products",
                issued_at=issued,
            )
        )

        credential = await any_credential_store.get(SHOPIFY_TEST_SHOP)
        assert credential is not None
        assert credential.access_token.get_secret_value() == "tok_abc"
        assert credential.scope == "read_products"
        assert credential.issued_at == issued

    async def test_new_token_replaces_old(self, any_credential_store: CredentialStore) -> None:
        await any_credential_store.set(
            ShopCredential(shop_domain=SHOPIFY_TEST_SHOP, access_token="tok_old")
        )
        await any_credential_store.set(
            ShopCredential(shop_domain=SHOPIFY_TEST_SHOP, access_token="tok_new")
        )

        assert await any_credential_store.get_token(SHOPIFY_TEST_SHOP) == "tok_new"
        assert await any_credential_store.list_shops() == [SHOPIFY_TEST_SHOP]

    async def test_delete(self, any_credential_store: CredentialStore) -> None:
        await any_credential_store.set(
            ShopCredential(shop_domain=SHOPIFY_TEST_SHOP, access_token="tok")
        )

        assert await any_credential_store.delete(SHOPIFY_TEST_SHOP) is True
        assert await any_credential_store.delete(SHOPIFY_TEST_SHOP) is False
        assert await any_credential_store.has(SHOPIFY_TEST_SHOP) is False

    async def test_clear(self, any_credential_store: CredentialStore) -> None:
        for shop in ("a.myshopify.com", "b.myshopify.com"):
            await any_credential_store.set(ShopCredential(shop_domain=shop, access_token="t"))

        assert sorted(await any_credential_store.list_shops()) == [
            "a.myshopify.com",
            "b.myshopify.com",
        ]
        await any_credential_store.clear()
        assert await any_credential_store.list_shops() == []

    def test_repr_hides_token(self) -> None:
        credential = ShopCredential(shop_domain=SHOPIFY_TEST_SHOP, access_token="tok_secret")

        assert "tok_secret" not in repr(credential)
        assert "tok_secret" not in credential.model_dump_json()


class TestRedisCredentialStore:
    async def test_token_encrypted_at_rest(
        self, fake_redis: fakeredis.aioredis.FakeRedis
    ) -> None:
        store = RedisCredentialStore(fake_redis, ENCRYPTION_KEY)
        await store.set(ShopCredential(shop_domain=SHOPIFY_TEST_SHOP, access_token="tok_abc"))

        raw = json.loads(await fake_redis.get(f"credentials:{SHOPIFY_TEST_SHOP}"))
        assert raw["access_token"] != "tok_abc"
        assert decrypt_token(raw["access_token"], ENCRYPTION_KEY) == "tok_abc"

    async def test_isolated_by_instance(self) -> None:
        """Two stores over separate Redis servers do not see each other."""
        first = RedisCredentialStore(fakeredis.aioredis.FakeRedis(decode_responses=True), "k")
        second = RedisCredentialStore(fakeredis.aioredis.FakeRedis(decode_responses=True), "k")
        await first.set(ShopCredential(shop_domain=SHOPIFY_TEST_SHOP, access_token="t"))

        assert await second.get(SHOPIFY_TEST_SHOP) is None


# ---------------------------------------------------------------------------
# OAuth state stores
# ---------------------------------------------------------------------------


class TestStateStore:
    async def test_consume_once(self, any_state_store: AuthorizationStateStore) -> None:
        await any_state_store.put(
            AuthorizationState(nonce="n1", shop_domain=SHOPIFY_TEST_SHOP), ttl_seconds=60
        )

        first = await any_state_store.consume("n1")
        second = await any_state_store.consume("n1")

        assert first is not None
        assert first.shop_domain == SHOPIFY_TEST_SHOP
        assert second is None

    async def test_unknown_nonce(self, any_state_store: AuthorizationStateStore) -> None:
        assert await any_state_store.consume("never-issued") is None

    async def test_concurrent_consume_has_single_winner(
        self, any_state_store: AuthorizationStateStore
    ) -> None:
        await any_state_store.put(
            AuthorizationState(nonce="race", shop_domain=SHOPIFY_TEST_SHOP), ttl_seconds=60
        )

        results = await asyncio.gather(*(any_state_store.consume("race") for _ in range(5)))

        assert sum(result is not None for result in results) == 1


class TestInMemoryStateStoreExpiry:
    async def test_expired_nonce_is_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        clock = [1000.0]
        monkeypatch.setattr("wholesale_bridge.stores.states.time.monotonic", lambda: clock[0])
        store = InMemoryStateStore()
        await store.put(AuthorizationState(nonce="n", shop_domain=SHOPIFY_TEST_SHOP), 600)

        clock[0] += 601

        assert await store.consume("n") is None
        assert len(store) == 0


class TestRedisStateStoreExpiry:
    async def test_ttl_set_on_key(self, fake_redis: fakeredis.aioredis.FakeRedis) -> None:
        store = RedisStateStore(fake_redis)
        await store.put(AuthorizationState(nonce="n", shop_domain=SHOPIFY_TEST_SHOP), 600)

        ttl = await fake_redis.ttl("shopify_oauth:n")
        assert 0 < ttl <= 600


# ---------------------------------------------------------------------------
# App configuration
# ---------------------------------------------------------------------------


class TestAppConfigStore:
    def test_mask_secret(self) -> None:
        assert mask_secret(None) == ""
        assert mask_secret("abc") == "********"
        assert mask_secret("supersecret1234") == "********1234"

    async def test_catalog_credentials_from_saved_config(self) -> None:
        store = AppConfigStore()
        assert await store.catalog_credentials() is None

        await store.save(
            AppConfig(
                app_id="id",
                secret_key="key",
                shopify_store_url=SHOPIFY_TEST_SHOP,
                shopify_access_token="shpat_x",
            )
        )

        credentials = await store.catalog_credentials()
        assert credentials is not None
        assert credentials.app_id == "id"
        assert credentials.secret_key == "key"
