"""Import a wholesale catalog product into a merchant's Shopify store."""

import logging
from typing import Any

from wholesale_bridge.core.errors import MalformedRequest, ProductNotFound, ShopNotAuthenticated
from wholesale_bridge.integrations.catalog.client import CatalogClient
from wholesale_bridge.integrations.shopify.client import ShopifyClient
from wholesale_bridge.integrations.shopify.oauth import normalize_shop
from wholesale_bridge.schemas.catalog import (
    CatalogCredentials,
    CatalogProduct,
    ImportRequest,
    ImportResponse,
)
from wholesale_bridge.stores.credentials import CredentialStore

logger = logging.getLogger(__name__)

DEFAULT_VENDOR = "Azan Wholesale"
DEFAULT_PRODUCT_TYPE = "General"


def to_shopify_product(product: CatalogProduct, custom_price: float | None = None) -> dict[str, Any]:
    """Map a catalog product onto the Shopify product create payload."""
    price = custom_price or product.mrp_price
    return {
        "title": product.name,
        "body_html": product.description or "",
        "vendor": product.brand or DEFAULT_VENDOR,
        "product_type": product.category or DEFAULT_PRODUCT_TYPE,
        "variants": [
            {
                "title": "Default",
                "price": str(int(price)) if float(price).is_integer() else str(price),
                "sku": product.sku,
                "inventory_quantity": product.stock,
                "inventory_management": "shopify",
            }
        ],
        "images": [{"src": picture} for picture in product.pictures],
    }


class ProductImporter:
    def __init__(self, credentials: CredentialStore) -> None:
        self.credentials = credentials

    async def import_product(self, request: ImportRequest) -> ImportResponse:
        """Copy one catalog product into the shop.

        Raises:
            MalformedRequest: A required field is missing.
            ShopNotAuthenticated: The shop has not completed OAuth.
            CatalogError: The catalog could not be read.
            ProductNotFound: The product id is not in the catalog.
            ShopifyAPIError: Shopify refused the product.
        """
        if not (request.product_id and request.shop and request.app_id and request.secret_key):
            raise MalformedRequest("Missing required fields")

        shop = normalize_shop(request.shop)
        access_token = await self.credentials.get_token(shop)
        if not access_token:
            raise ShopNotAuthenticated("Shop not authenticated. Please reinstall the app.")

        catalog = CatalogClient(
            CatalogCredentials(app_id=request.app_id, secret_key=request.secret_key)
        )
        product = await catalog.get_product(request.product_id)
        if product is None:
            raise ProductNotFound("Product not found")

        shopify = ShopifyClient(shop, access_token)
        created = await shopify.create_product(to_shopify_product(product, request.custom_price))
        logger.info(
            "Imported catalog product %s into %s as %s", product.id, shop, created.get("id")
        )
        return ImportResponse(azan_product=product, shopify_product=created)
