"""Completion of the Shopify OAuth flow.

The callback runs as a fixed sequence: validate, verify the HMAC, consume the
state nonce, exchange the code, fetch shop metadata, commit the credential.
Nothing touches shared state or the network until the first three steps have
passed, and the credential commit is the only write.
"""

import dataclasses
import logging
from collections.abc import Mapping
from urllib.parse import urlencode

import httpx

from wholesale_bridge.core.config import settings
from wholesale_bridge.core.errors import (
    AuthenticationFailed,
    InvalidShopDomain,
    MalformedRequest,
    MetadataFetchFailed,
    ReplayOrForgedState,
)
from wholesale_bridge.integrations.shopify.client import ShopifyClient
from wholesale_bridge.integrations.shopify.oauth import (
    exchange_code_for_token,
    is_valid_shop_domain,
    normalize_shop,
)
from wholesale_bridge.integrations.shopify.signatures import Verdict, verify_query
from wholesale_bridge.schemas.oauth import ShopCredential, ShopMetadata
from wholesale_bridge.stores.credentials import CredentialStore
from wholesale_bridge.stores.states import AuthorizationStateStore

logger = logging.getLogger(__name__)

REQUIRED_PARAMS = ("shop", "code", "hmac")


@dataclasses.dataclass
class CallbackResult:
    shop: str
    credential: ShopCredential
    redirect_url: str
    metadata: ShopMetadata | None = None
    metadata_error: MetadataFetchFailed | None = None


def landing_url(shop: str) -> str:
    """Where the merchant lands after a successful install."""
    if settings.embedded_redirect:
        return f"https://{shop}/admin/apps/{settings.shopify_api_key}"
    return f"{settings.app_url.rstrip('/')}/?{urlencode({'shop': shop, 'success': 'true'})}"


class CallbackExchanger:
    def __init__(self, credentials: CredentialStore, states: AuthorizationStateStore) -> None:
        self.credentials = credentials
        self.states = states

    async def complete(self, params: Mapping[str, str]) -> CallbackResult:
        """Run the callback for the received query parameters.

        Raises:
            MalformedRequest: A required parameter is missing or the shop is invalid.
            AuthenticationFailed: The ``hmac`` parameter does not match.
            ReplayOrForgedState: ``state`` was not issued for this shop or was already used.
            ExchangeFailed: Shopify did not issue a token.
        """
        missing = [name for name in REQUIRED_PARAMS if not params.get(name)]
        if missing:
            raise MalformedRequest("Missing required parameters")
        if not is_valid_shop_domain(params["shop"]):
            raise InvalidShopDomain("Invalid shop domain")

        if verify_query(params, settings.shopify_api_secret) is not Verdict.AUTHENTIC:
            logger.warning("Rejected OAuth callback with invalid HMAC for %s", params["shop"])
            raise AuthenticationFailed("Invalid HMAC signature")

        shop = normalize_shop(params["shop"])
        await self._consume_state(shop, params.get("state"))

        access_token, scope = await exchange_code_for_token(shop, params["code"])

        metadata: ShopMetadata | None = None
        metadata_error: MetadataFetchFailed | None = None
        client = ShopifyClient(shop, access_token)
        try:
            metadata = await client.get_shop()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Shop metadata fetch for %s failed: %s", shop, type(exc).__name__)
            metadata_error = MetadataFetchFailed(
                "Access token issued but shop metadata could not be fetched",
                upstream_status=_status_of(exc),
            )

        credential = ShopCredential(shop_domain=shop, access_token=access_token, scope=scope)
        await self.credentials.set(credential)
        logger.info(
            "Shop connected: %s (%s)", shop, metadata.name if metadata else "metadata unavailable"
        )

        if settings.register_webhooks:
            await self._register_webhooks(client)

        return CallbackResult(
            shop=shop,
            credential=credential,
            redirect_url=landing_url(shop),
            metadata=metadata,
            metadata_error=metadata_error,
        )

    async def _consume_state(self, shop: str, nonce: str | None) -> None:
        if not nonce:
            logger.warning("OAuth callback for %s without state", shop)
            raise ReplayOrForgedState("Invalid or expired state")
        state = await self.states.consume(nonce)
        if state is None:
            logger.warning("OAuth callback for %s with unknown or reused state", shop)
            raise ReplayOrForgedState("Invalid or expired state")
        if state.shop_domain != shop:
            logger.warning(
                "OAuth state issued for %s presented by %s", state.shop_domain, shop
            )
            raise ReplayOrForgedState("Shop mismatch")

    async def _register_webhooks(self, client: ShopifyClient) -> None:
        try:
            await client.register_webhooks()
        except httpx.HTTPError as exc:
            # Non-fatal, webhooks can be registered on the next install
            logger.warning(
                "Webhook registration for %s failed: %s", client.shop_domain, type(exc).__name__
            )


def _status_of(exc: Exception) -> int | None:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None
