"""Pending OAuth state (nonce) storage with single-use consumption."""

import asyncio
import time
from abc import ABC, abstractmethod

import redis.asyncio as aioredis

from wholesale_bridge.schemas.oauth import AuthorizationState


class AuthorizationStateStore(ABC):
    """Nonces keyed by value. ``consume`` is an atomic get-and-delete."""

    @abstractmethod
    async def put(self, state: AuthorizationState, ttl_seconds: int) -> None: ...

    @abstractmethod
    async def consume(self, nonce: str) -> AuthorizationState | None: ...


class InMemoryStateStore(AuthorizationStateStore):
    def __init__(self) -> None:
        self._states: dict[str, tuple[AuthorizationState, float]] = {}
        self._lock = asyncio.Lock()

    def _purge_expired(self, now: float) -> None:
        expired = [nonce for nonce, (_, expires) in self._states.items() if expires <= now]
        for nonce in expired:
            del self._states[nonce]

    async def put(self, state: AuthorizationState, ttl_seconds: int) -> None:
        async with self._lock:
            now = time.monotonic()
            self._purge_expired(now)
            self._states[state.nonce] = (state, now + ttl_seconds)

    async def consume(self, nonce: str) -> AuthorizationState | None:
        async with self._lock:
            self._purge_expired(time.monotonic())
            entry = self._states.pop(nonce, None)
        return entry[0] if entry else None

    def __len__(self) -> int:
        return len(self._states)


class RedisStateStore(AuthorizationStateStore):
    KEY_PREFIX = "shopify_oauth:"

    def __init__(self, redis: aioredis.Redis) -> None:
        self.redis = redis

    async def put(self, state: AuthorizationState, ttl_seconds: int) -> None:
        await self.redis.set(
            f"{self.KEY_PREFIX}{state.nonce}", state.model_dump_json(), ex=ttl_seconds
        )

    async def consume(self, nonce: str) -> AuthorizationState | None:
        raw = await self.redis.getdel(f"{self.KEY_PREFIX}{nonce}")
        if not raw:
            return None
        return AuthorizationState.model_validate_json(raw)
