"""Order webhook handling: paid orders decrement wholesale stock."""

import asyncio
import dataclasses
import enum
import logging
from collections.abc import Callable

from pydantic import ValidationError

from wholesale_bridge.core.config import settings
from wholesale_bridge.core.errors import (
    AuthenticationFailed,
    CatalogError,
    MalformedRequest,
    MissingCredentials,
)
from wholesale_bridge.integrations.catalog.client import CatalogClient
from wholesale_bridge.integrations.shopify.signatures import Verdict, verify_body
from wholesale_bridge.schemas.catalog import CatalogCredentials
from wholesale_bridge.schemas.order import ShopifyOrder, StockUpdate

logger = logging.getLogger(__name__)

SUPPORTED_TOPICS = frozenset({"orders/create", "orders/updated"})


class OutcomeKind(enum.StrEnum):
    PROCESSED = "processed"
    UNSUPPORTED_TOPIC = "unsupported_topic"
    SKIPPED_UNPAID = "skipped_unpaid"
    NO_SKU_ITEMS = "no_sku_items"


@dataclasses.dataclass
class WebhookOutcome:
    kind: OutcomeKind
    message: str
    success: bool = True
    order_id: int | None = None
    updates: list[StockUpdate] | None = None
    failed: list[str] | None = None


def build_stock_updates(order: ShopifyOrder) -> list[StockUpdate]:
    """One decrease per line item that carries a SKU; the rest are not tracked."""
    return [
        StockUpdate(sku=item.sku, quantity=item.quantity, action="decrease")
        for item in order.line_items
        if item.sku
    ]


class WebhookIngestor:
    """Verifies order webhooks and forwards stock decrements to the catalog."""

    def __init__(
        self, catalog_factory: Callable[[CatalogCredentials], CatalogClient] = CatalogClient
    ) -> None:
        self.catalog_factory = catalog_factory

    async def ingest(
        self,
        topic: str | None,
        hmac_header: str | None,
        body: bytes,
        credentials: CatalogCredentials | None,
    ) -> WebhookOutcome:
        """Process one delivery.

        Raises:
            AuthenticationFailed: The body signature does not match.
            MalformedRequest: The body is not an order payload.
            MissingCredentials: Stock updates exist but no catalog credentials do.
        """
        if topic not in SUPPORTED_TOPICS:
            return WebhookOutcome(OutcomeKind.UNSUPPORTED_TOPIC, "Unsupported webhook topic")

        if verify_body(body, hmac_header, settings.webhook_secret) is not Verdict.AUTHENTIC:
            logger.warning("Rejected %s webhook with invalid HMAC", topic)
            raise AuthenticationFailed("Invalid webhook signature")

        try:
            order = ShopifyOrder.model_validate_json(body)
        except ValidationError as exc:
            raise MalformedRequest("Invalid order payload") from exc

        if order.financial_status != "paid":
            return WebhookOutcome(
                OutcomeKind.SKIPPED_UNPAID,
                "Order not paid, skipping stock update",
                order_id=order.id,
            )

        updates = build_stock_updates(order)
        if not updates:
            return WebhookOutcome(
                OutcomeKind.NO_SKU_ITEMS, "No items with SKU found in order", order_id=order.id
            )

        if credentials is None:
            raise MissingCredentials("Missing Azan API credentials")

        failed = await self._submit(self.catalog_factory(credentials), updates)
        sent = len(updates) - len(failed)
        if failed:
            logger.warning(
                "Order %s: %d of %d stock updates failed", order.id, len(failed), len(updates)
            )
            message = f"Stock updates processed for {sent} of {len(updates)} items"
        else:
            logger.info("Order %s: %d stock updates sent", order.id, sent)
            message = f"Stock updates processed for {sent} items"

        return WebhookOutcome(
            OutcomeKind.PROCESSED,
            message,
            success=sent > 0,
            order_id=order.id,
            updates=updates,
            failed=failed or None,
        )

    async def _submit(self, catalog: CatalogClient, updates: list[StockUpdate]) -> list[str]:
        """Send every update independently; return SKUs that failed."""
        results = await asyncio.gather(
            *(catalog.update_stock(update) for update in updates), return_exceptions=True
        )
        failed = []
        for update, result in zip(updates, results, strict=True):
            if isinstance(result, CatalogError):
                logger.warning("Stock update for SKU %s failed: %s", update.sku, result.message)
                failed.append(update.sku)
            elif isinstance(result, Exception):
                logger.error(
                    "Stock update for SKU %s failed unexpectedly", update.sku, exc_info=result
                )
                failed.append(update.sku)
            elif isinstance(result, BaseException):
                raise result
        return failed
