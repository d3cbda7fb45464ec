"""API router combining all route modules."""

from fastapi import APIRouter

from wholesale_bridge.api import auth, config, health, products, webhooks

api_router = APIRouter()

# Health check routes (no prefix)
api_router.include_router(health.router)

# Shopify OAuth
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["auth"],
)

# Shopify webhooks (no auth - verified via HMAC)
api_router.include_router(
    webhooks.router,
    prefix="/webhooks",
    tags=["webhooks"],
)

# Catalog listing and product import (no prefix)
api_router.include_router(
    products.router,
    tags=["products"],
)

# Merchant configuration
api_router.include_router(
    config.router,
    prefix="/config",
    tags=["config"],
)
