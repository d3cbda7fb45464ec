"""Start of the Shopify OAuth flow."""

import logging
import secrets

from wholesale_bridge.core.config import settings
from wholesale_bridge.core.errors import InvalidShopDomain, MalformedRequest
from wholesale_bridge.integrations.shopify.oauth import (
    build_auth_url,
    is_valid_shop_domain,
    normalize_shop,
)
from wholesale_bridge.schemas.oauth import AuthorizationState
from wholesale_bridge.stores.states import AuthorizationStateStore

logger = logging.getLogger(__name__)

NONCE_BYTES = 32


class AuthorizationInitiator:
    """Issues a nonce for a shop and builds the consent-screen redirect."""

    def __init__(self, states: AuthorizationStateStore) -> None:
        self.states = states

    async def start(self, shop: str | None) -> str:
        """Return the URL to redirect the merchant to.

        Raises:
            MalformedRequest: ``shop`` is missing.
            InvalidShopDomain: ``shop`` is not a Shopify store domain.
        """
        if not shop:
            raise MalformedRequest("Shop parameter is required")
        if not is_valid_shop_domain(shop):
            raise InvalidShopDomain("Invalid shop domain")
        shop = normalize_shop(shop)

        nonce = secrets.token_urlsafe(NONCE_BYTES)
        await self.states.put(
            AuthorizationState(nonce=nonce, shop_domain=shop),
            ttl_seconds=settings.nonce_ttl_seconds,
        )
        logger.info("Starting OAuth for %s", shop)
        return build_auth_url(shop, nonce)
