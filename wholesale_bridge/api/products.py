"""Wholesale catalog browsing and product import."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from wholesale_bridge.api.webhooks import failure_response
from wholesale_bridge.core.deps import CatalogAuth, Credentials
from wholesale_bridge.core.errors import BridgeError, MissingCredentials
from wholesale_bridge.integrations.catalog.client import CatalogClient
from wholesale_bridge.schemas.catalog import ImportRequest, ImportResponse
from wholesale_bridge.schemas.common import StatusResponse
from wholesale_bridge.services.product_import import ProductImporter

router = APIRouter(responses={400: {"model": StatusResponse}, 401: {"model": StatusResponse}})


@router.get("/products", response_model=None)
async def list_products(credentials: CatalogAuth) -> dict[str, object] | JSONResponse:
    """List the catalog products visible to the configured App-ID."""
    try:
        if credentials is None:
            raise MissingCredentials("Missing Azan API credentials")
        products = await CatalogClient(credentials).get_products()
    except BridgeError as exc:
        return failure_response(exc)
    return {"success": True, "data": [p.model_dump() for p in products]}


@router.post("/import", response_model=ImportResponse)
async def import_product(
    body: ImportRequest, credentials: Credentials
) -> ImportResponse | JSONResponse:
    """Create a Shopify product from a catalog product."""
    try:
        return await ProductImporter(credentials).import_product(body)
    except BridgeError as exc:
        return failure_response(exc)
