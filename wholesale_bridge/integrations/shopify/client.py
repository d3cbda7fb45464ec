"""Shopify Admin API client using httpx."""

import logging
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from wholesale_bridge.core.config import settings
from wholesale_bridge.core.errors import ShopifyAPIError
from wholesale_bridge.schemas.oauth import ShopMetadata

logger = logging.getLogger(__name__)

WEBHOOK_TOPICS = {
    "orders/create": "orders",
    "orders/updated": "orders",
    "app/uninstalled": "app-uninstalled",
}


def _is_retryable(exc: BaseException) -> bool:
    """Transport errors and 5xx responses; 4xx will not change on retry."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return isinstance(exc, httpx.TransportError)


class ShopifyClient:
    """Async client for the Shopify Admin REST API."""

    def __init__(self, shop_domain: str, access_token: str) -> None:
        self.shop_domain = shop_domain
        self.base_url = f"https://{shop_domain}/admin/api/{settings.shopify_api_version}"
        self.headers = {
            "X-Shopify-Access-Token": access_token,
            "Content-Type": "application/json",
        }

    def __repr__(self) -> str:
        return f"ShopifyClient(shop_domain={self.shop_domain!r})"

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, max=4),
        retry=retry_if_exception(_is_retryable),
        reraise=True,
    )
    async def get_shop(self) -> ShopMetadata:
        """Fetch shop metadata. Idempotent, so retried with bounded backoff."""
        async with httpx.AsyncClient(
            headers=self.headers, timeout=settings.http_timeout_seconds
        ) as client:
            response = await client.get(f"{self.base_url}/shop.json")
            response.raise_for_status()
            return ShopMetadata.model_validate(response.json().get("shop", {}))

    async def create_product(self, product: dict[str, Any]) -> dict[str, Any]:
        """Create a product and return Shopify's representation of it."""
        async with httpx.AsyncClient(
            headers=self.headers, timeout=settings.http_timeout_seconds
        ) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/products.json", json={"product": product}
                )
            except httpx.HTTPError as exc:
                raise ShopifyAPIError("Failed to reach Shopify") from exc

        if response.status_code != 201:
            logger.warning(
                "Product create on %s returned %s: %s",
                self.shop_domain,
                response.status_code,
                response.text[:500],
            )
            raise ShopifyAPIError(
                "Failed to create product in Shopify", upstream_status=response.status_code
            )
        created: dict[str, Any] = response.json().get("product", {})
        return created

    async def register_webhooks(self) -> None:
        """Register the order and uninstall webhooks this app listens to."""
        base_address = f"{settings.app_url.rstrip('/')}{settings.api_prefix}/webhooks"

        async with httpx.AsyncClient(
            headers=self.headers, timeout=settings.http_timeout_seconds
        ) as client:
            for topic, path in WEBHOOK_TOPICS.items():
                response = await client.post(
                    f"{self.base_url}/webhooks.json",
                    json={
                        "webhook": {
                            "topic": topic,
                            "address": f"{base_address}/{path}",
                            "format": "json",
                        }
                    },
                )
                if not response.is_success:
                    logger.warning(
                        "Failed to register webhook %s for %s: %s",
                        topic,
                        self.shop_domain,
                        response.status_code,
                    )
