"""Schemas for the wholesale catalog and product import."""

from typing import Any

from pydantic import Field

from wholesale_bridge.schemas.common import BaseSchema, StatusResponse


class CatalogCredentials(BaseSchema):
    """App-ID / Secret-Key pair for the wholesale catalog API."""

    app_id: str
    secret_key: str


class CatalogProduct(BaseSchema):
    """A product as listed by the wholesale catalog."""

    id: int
    name: str
    slug: str | None = None
    sku: str | None = None
    mrp_price: float = 0
    wholesale_price: float = 0
    stock: int = 0
    description: str | None = None
    pictures: list[str] = Field(default_factory=list)
    category: str | None = None
    brand: str | None = None


class ImportRequest(BaseSchema):
    """Body of POST /import."""

    product_id: int | None = Field(default=None, alias="productId")
    shop: str | None = None
    custom_price: float | None = Field(default=None, alias="customPrice")
    app_id: str | None = Field(default=None, alias="appId")
    secret_key: str | None = Field(default=None, alias="secretKey")


class ImportResponse(StatusResponse):
    """Result of a successful product import."""

    success: bool = True
    message: str = "Product imported successfully"
    azan_product: CatalogProduct = Field(alias="azanProduct")
    shopify_product: dict[str, Any] = Field(alias="shopifyProduct")


class AppConfig(BaseSchema):
    """Merchant-entered settings saved from the embedded app."""

    app_id: str | None = Field(default=None, alias="appId")
    secret_key: str | None = Field(default=None, alias="secretKey")
    shopify_store_url: str | None = Field(default=None, alias="shopifyStoreUrl")
    shopify_access_token: str | None = Field(default=None, alias="shopifyAccessToken")


class AppConfigResponse(StatusResponse):
    """Saved configuration with secrets masked."""

    success: bool = True
    config: dict[str, str] | None = None
