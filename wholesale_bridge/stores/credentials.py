"""Per-shop access token storage.

Callers depend on :class:`CredentialStore` only; the concrete backend is
chosen once in the application factory and injected through FastAPI
dependencies.
"""

import asyncio
import json
from abc import ABC, abstractmethod

import redis.asyncio as aioredis

from wholesale_bridge.core.encryption import decrypt_token, encrypt_token
from wholesale_bridge.schemas.oauth import ShopCredential


class CredentialStore(ABC):
    """Keyed by shop domain. At most one credential per shop; ``set`` replaces."""

    @abstractmethod
    async def get(self, shop: str) -> ShopCredential | None: ...

    @abstractmethod
    async def set(self, credential: ShopCredential) -> None: ...

    @abstractmethod
    async def delete(self, shop: str) -> bool: ...

    @abstractmethod
    async def list_shops(self) -> list[str]: ...

    @abstractmethod
    async def clear(self) -> None: ...

    async def has(self, shop: str) -> bool:
        return await self.get(shop) is not None

    async def get_token(self, shop: str) -> str | None:
        credential = await self.get(shop)
        return credential.access_token.get_secret_value() if credential else None


class InMemoryCredentialStore(CredentialStore):
    """Process-local store. Lost on restart."""

    def __init__(self) -> None:
        self._credentials: dict[str, ShopCredential] = {}
        self._lock = asyncio.Lock()

    async def get(self, shop: str) -> ShopCredential | None:
        return self._credentials.get(shop)

    async def set(self, credential: ShopCredential) -> None:
        async with self._lock:
            self._credentials[credential.shop_domain] = credential

    async def delete(self, shop: str) -> bool:
        async with self._lock:
            return self._credentials.pop(shop, None) is not None

    async def list_shops(self) -> list[str]:
        return list(self._credentials)

    async def clear(self) -> None:
        async with self._lock:
            self._credentials.clear()


class RedisCredentialStore(CredentialStore):
    """Durable store. Tokens are Fernet-encrypted before they reach Redis."""

    KEY_PREFIX = "credentials:"

    def __init__(self, redis: aioredis.Redis, encryption_key: str) -> None:
        self.redis = redis
        self.encryption_key = encryption_key

    def _key(self, shop: str) -> str:
        return f"{self.KEY_PREFIX}{shop}"

    async def get(self, shop: str) -> ShopCredential | None:
        raw = await self.redis.get(self._key(shop))
        if not raw:
            return None
        data = json.loads(raw)
        data["access_token"] = decrypt_token(data["access_token"], self.encryption_key)
        return ShopCredential.model_validate(data)

    async def set(self, credential: ShopCredential) -> None:
        payload = {
            "shop_domain": credential.shop_domain,
            "access_token": encrypt_token(
                credential.access_token.get_secret_value(), self.encryption_key
            ),
            "scope": credential.scope,
            "issued_at": credential.issued_at.isoformat(),
        }
        await self.redis.set(self._key(credential.shop_domain), json.dumps(payload))

    async def delete(self, shop: str) -> bool:
        return bool(await self.redis.delete(self._key(shop)))

    async def list_shops(self) -> list[str]:
        shops = []
        async for key in self.redis.scan_iter(match=f"{self.KEY_PREFIX}*"):
            shops.append(key.removeprefix(self.KEY_PREFIX))
        return sorted(shops)

    async def clear(self) -> None:
        keys = [key async for key in self.redis.scan_iter(match=f"{self.KEY_PREFIX}*")]
        if keys:
            await self.redis.delete(*keys)
