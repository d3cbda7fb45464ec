"""Shopify webhook endpoints (no auth, verified via HMAC)."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from wholesale_bridge.core.config import settings
from wholesale_bridge.core.deps import CatalogAuth, Credentials
from wholesale_bridge.core.errors import AuthenticationFailed, BridgeError
from wholesale_bridge.integrations.shopify.oauth import is_valid_shop_domain, normalize_shop
from wholesale_bridge.integrations.shopify.signatures import Verdict, verify_body
from wholesale_bridge.schemas.common import StatusResponse
from wholesale_bridge.schemas.order import OrderWebhookResponse
from wholesale_bridge.services.order_webhook import WebhookIngestor

logger = logging.getLogger(__name__)

router = APIRouter(responses={400: {"model": StatusResponse}, 401: {"model": StatusResponse}})


def failure_response(exc: BridgeError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=StatusResponse(success=False, message=exc.message).model_dump(),
    )


@router.post("/orders", response_model=OrderWebhookResponse, response_model_exclude_none=True)
async def orders(
    request: Request, credentials: CatalogAuth
) -> OrderWebhookResponse | JSONResponse:
    """Decrement wholesale stock for paid orders.

    Acknowledged with 200 for every delivery that is not a signature or
    configuration failure, so Shopify does not retry no-ops.
    """
    body = await request.body()
    try:
        outcome = await WebhookIngestor().ingest(
            request.headers.get("X-Shopify-Topic"),
            request.headers.get("X-Shopify-Hmac-Sha256"),
            body,
            credentials,
        )
    except BridgeError as exc:
        return failure_response(exc)

    return OrderWebhookResponse(
        success=outcome.success,
        message=outcome.message,
        updates=outcome.updates,
        order_id=outcome.order_id,
        failed=outcome.failed,
    )


@router.post("/app-uninstalled", response_model=None)
async def app_uninstalled(
    request: Request, credentials: Credentials
) -> dict[str, str] | JSONResponse:
    """Forget the shop's token once the app is removed."""
    body = await request.body()
    hmac_header = request.headers.get("X-Shopify-Hmac-Sha256")
    if verify_body(body, hmac_header, settings.webhook_secret) is not Verdict.AUTHENTIC:
        logger.warning("Rejected app/uninstalled webhook with invalid HMAC")
        return failure_response(AuthenticationFailed("Invalid webhook signature"))

    shop = request.headers.get("X-Shopify-Shop-Domain", "")
    if not is_valid_shop_domain(shop):
        logger.warning("app/uninstalled webhook with invalid shop domain %r", shop)
        return {"status": "ignored"}
    shop = normalize_shop(shop)
    removed = await credentials.delete(shop)
    logger.info("App uninstalled from %s", shop)
    return {"status": "deleted" if removed else "ignored"}
