"""Shopify OAuth helpers: shop-domain validation, authorize URL and token exchange."""

import logging
import re
from urllib.parse import urlencode

import httpx

from wholesale_bridge.core.config import settings
from wholesale_bridge.core.errors import ExchangeFailed

logger = logging.getLogger(__name__)

_SHOP_LABEL = re.compile(r"^[a-z0-9][a-z0-9-]*$")


def normalize_shop(shop: str) -> str:
    return shop.strip().lower()


def is_valid_shop_domain(shop: str) -> bool:
    """Check that ``shop`` is a bare ``<name><suffix>`` store domain.

    Rejects schemes, paths, ports and nested subdomains so that the value can
    be safely interpolated into ``https://{shop}/...``.
    """
    shop = normalize_shop(shop)
    for suffix in settings.shop_domain_suffixes:
        if shop.endswith(suffix):
            return bool(_SHOP_LABEL.match(shop[: -len(suffix)]))
    return False


def build_auth_url(shop: str, nonce: str) -> str:
    """Build the Shopify OAuth authorization URL.

    Args:
        shop: The shop domain (e.g. mystore.myshopify.com).
        nonce: Random state parameter for CSRF protection.

    Returns:
        The full authorization URL to redirect the merchant to.
    """
    query = [
        ("client_id", settings.shopify_api_key),
        ("scope", settings.shopify_scopes),
        ("redirect_uri", settings.oauth_redirect_uri),
        ("state", nonce),
    ]
    if settings.shopify_online_tokens:
        query.append(("grant_options[]", "per-user"))
    return f"https://{shop}/admin/oauth/authorize?{urlencode(query)}"


async def exchange_code_for_token(shop: str, code: str) -> tuple[str, str]:
    """Exchange the OAuth authorization code for an access token.

    Not retried: a code is single-use on Shopify's side, so a second attempt
    after an ambiguous failure would only fail again.

    Returns:
        Tuple of (access_token, granted_scopes).

    Raises:
        ExchangeFailed: On transport errors, non-2xx responses or a response
            without ``access_token``.
    """
    url = f"https://{shop}/admin/oauth/access_token"
    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
            response = await client.post(url, json={
                "client_id": settings.shopify_api_key,
                "client_secret": settings.shopify_api_secret,
                "code": code,
            })
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPStatusError as exc:
        status_code = exc.response.status_code
        logger.error("Token exchange for %s rejected with status %s", shop, status_code)
        raise ExchangeFailed(
            f"Token exchange failed with status {status_code}", upstream_status=status_code
        ) from exc
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("Token exchange for %s failed: %s", shop, type(exc).__name__)
        raise ExchangeFailed("Token exchange request failed") from exc

    access_token = data.get("access_token") if isinstance(data, dict) else None
    if not access_token:
        raise ExchangeFailed("Token exchange response did not include an access token")
    return access_token, data.get("scope", "")
