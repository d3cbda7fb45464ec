"""Dependency injection for FastAPI routes.

Stores are built once by the application factory and kept on ``app.state``;
these dependencies hand them to routes so tests can swap them per app.
"""

from typing import Annotated

from fastapi import Depends, Request

from wholesale_bridge.core.config import settings
from wholesale_bridge.schemas.catalog import CatalogCredentials
from wholesale_bridge.stores.app_config import AppConfigStore
from wholesale_bridge.stores.credentials import CredentialStore
from wholesale_bridge.stores.states import AuthorizationStateStore


def get_credential_store(request: Request) -> CredentialStore:
    store: CredentialStore = request.app.state.credential_store
    return store


def get_state_store(request: Request) -> AuthorizationStateStore:
    store: AuthorizationStateStore = request.app.state.state_store
    return store


def get_app_config_store(request: Request) -> AppConfigStore:
    store: AppConfigStore = request.app.state.app_config_store
    return store


async def get_catalog_credentials(
    request: Request,
    app_config: AppConfigStore = Depends(get_app_config_store),
) -> CatalogCredentials | None:
    """Resolve catalog credentials: environment, then saved config, then request headers."""
    if settings.catalog_app_id and settings.catalog_secret_key:
        return CatalogCredentials(
            app_id=settings.catalog_app_id, secret_key=settings.catalog_secret_key
        )
    saved = await app_config.catalog_credentials()
    if saved:
        return saved
    app_id = request.headers.get("x-azan-app-id")
    secret_key = request.headers.get("x-azan-secret-key")
    if app_id and secret_key:
        return CatalogCredentials(app_id=app_id, secret_key=secret_key)
    return None


Credentials = Annotated[CredentialStore, Depends(get_credential_store)]
States = Annotated[AuthorizationStateStore, Depends(get_state_store)]
AppConfigs = Annotated[AppConfigStore, Depends(get_app_config_store)]
CatalogAuth = Annotated[CatalogCredentials | None, Depends(get_catalog_credentials)]


__all__ = [
    "AppConfigs",
    "CatalogAuth",
    "Credentials",
    "States",
    "get_app_config_store",
    "get_catalog_credentials",
    "get_credential_store",
    "get_state_store",
]
