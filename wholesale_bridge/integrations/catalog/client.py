"""Azan Wholesale catalog API client using httpx."""

import logging
from typing import Any

import httpx

from wholesale_bridge.core.config import settings
from wholesale_bridge.core.errors import CatalogError
from wholesale_bridge.schemas.catalog import CatalogCredentials, CatalogProduct
from wholesale_bridge.schemas.order import StockUpdate

logger = logging.getLogger(__name__)

PRODUCTS_PATH = "/api/en/products/by-api"
STOCK_UPDATE_PATH = "/api/update-stock"


class CatalogClient:
    """Async client for the wholesale catalog REST API.

    Authenticates every request with the merchant's App-ID / Secret-Key pair.
    """

    def __init__(self, credentials: CatalogCredentials, base_url: str | None = None) -> None:
        self.base_url = (base_url or settings.catalog_base_url).rstrip("/")
        self.headers = {
            "Content-Type": "application/json",
            "App-ID": credentials.app_id,
            "Secret-Key": credentials.secret_key,
        }

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=settings.http_timeout_seconds,
        ) as client:
            try:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
                data = _decode(response)
            except httpx.HTTPStatusError as exc:
                status_code = exc.response.status_code
                logger.warning("Catalog %s %s returned %s", method, path, status_code)
                raise CatalogError(
                    _upstream_message(exc.response) or f"Catalog request failed ({status_code})",
                    upstream_status=status_code,
                ) from exc
            except httpx.HTTPError as exc:
                logger.warning("Catalog %s %s failed: %s", method, path, type(exc).__name__)
                raise CatalogError("Failed to reach the wholesale catalog") from exc
        return data

    async def get_products(self) -> list[CatalogProduct]:
        """Fetch the full product list exposed to this API key."""
        data = await self._request("GET", PRODUCTS_PATH)
        if not data.get("success"):
            raise CatalogError("Failed to fetch product data from Azan Wholesale")
        return [CatalogProduct.model_validate(item) for item in data.get("data", [])]

    async def get_product(self, product_id: int) -> CatalogProduct | None:
        for product in await self.get_products():
            if product.id == product_id:
                return product
        return None

    async def update_stock(self, update: StockUpdate) -> dict[str, Any]:
        """Submit a single stock instruction."""
        return await self._request("POST", STOCK_UPDATE_PATH, json=update.model_dump())


def _upstream_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        return str(message) if message else None
    return None


def _decode(response: httpx.Response) -> dict[str, Any]:
    """JSON object body of a 2xx reply. An empty 204 counts as an empty object."""
    if response.status_code == 204:
        return {}
    try:
        body = response.json()
    except ValueError as exc:
        raise CatalogError("Invalid response from the wholesale catalog") from exc
    if not isinstance(body, dict):
        raise CatalogError("Invalid response from the wholesale catalog")
    return body
