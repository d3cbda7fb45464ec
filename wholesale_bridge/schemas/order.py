"""Schemas for the Shopify order webhook and the stock instructions it yields."""

from typing import Literal

from pydantic import Field

from wholesale_bridge.schemas.common import BaseSchema, StatusResponse


class OrderLineItem(BaseSchema):
    """A line item as delivered in the order webhook payload."""

    id: int | None = None
    sku: str | None = None
    quantity: int = 0
    title: str | None = None
    variant_id: int | None = None


class ShopifyOrder(BaseSchema):
    """The fields of a Shopify order that stock sync relies on."""

    id: int
    order_number: int | str | None = None
    created_at: str | None = None
    financial_status: str | None = None
    fulfillment_status: str | None = None
    line_items: list[OrderLineItem] = Field(default_factory=list)


class StockUpdate(BaseSchema):
    """One stock instruction for the wholesale catalog."""

    sku: str
    quantity: int
    action: Literal["decrease", "increase"] = "decrease"


class OrderWebhookResponse(StatusResponse):
    """Acknowledgement returned to Shopify for an order webhook."""

    message: str
    updates: list[StockUpdate] | None = None
    order_id: int | None = Field(default=None, alias="orderId")
    failed: list[str] | None = None
