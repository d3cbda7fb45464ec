"""Merchant-entered app configuration held in memory."""

import asyncio

from wholesale_bridge.schemas.catalog import AppConfig, CatalogCredentials

MASK = "********"


def mask_secret(value: str | None) -> str:
    """Keep the last four characters so merchants can tell keys apart."""
    if not value:
        return ""
    if len(value) <= 4:
        return MASK
    return f"{MASK}{value[-4:]}"


class AppConfigStore:
    """Single saved configuration, replaced on every save. Lost on restart."""

    def __init__(self) -> None:
        self._config: AppConfig | None = None
        self._lock = asyncio.Lock()

    async def get(self) -> AppConfig | None:
        return self._config

    async def save(self, config: AppConfig) -> None:
        async with self._lock:
            self._config = config

    async def catalog_credentials(self) -> CatalogCredentials | None:
        config = self._config
        if config and config.app_id and config.secret_key:
            return CatalogCredentials(app_id=config.app_id, secret_key=config.secret_key)
        return None

    @staticmethod
    def masked(config: AppConfig | None) -> dict[str, str] | None:
        if config is None:
            return None
        return {
            "appId": config.app_id or "",
            "secretKey": mask_secret(config.secret_key),
            "shopifyStoreUrl": config.shopify_store_url or "",
            "shopifyAccessToken": mask_secret(config.shopify_access_token),
        }
