"""Merchant app configuration endpoints."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from wholesale_bridge.core.deps import AppConfigs
from wholesale_bridge.schemas.catalog import AppConfig, AppConfigResponse
from wholesale_bridge.schemas.common import StatusResponse
from wholesale_bridge.stores.app_config import AppConfigStore

router = APIRouter()


@router.get("")
async def get_config(store: AppConfigs) -> AppConfigResponse:
    return AppConfigResponse(config=AppConfigStore.masked(await store.get()))


@router.post("", response_model=AppConfigResponse)
async def save_config(body: AppConfig, store: AppConfigs) -> AppConfigResponse | JSONResponse:
    """Save catalog credentials and store details. Secrets are masked in the reply."""
    if not (body.app_id and body.secret_key and body.shopify_store_url and body.shopify_access_token):
        return JSONResponse(
            status_code=400,
            content=StatusResponse(success=False, message="Missing required fields").model_dump(),
        )
    await store.save(body)
    return AppConfigResponse(
        message="Configuration saved successfully",
        config=AppConfigStore.masked(body),
    )
