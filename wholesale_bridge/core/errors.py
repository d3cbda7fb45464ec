"""Typed failures raised by the OAuth, webhook and import flows.

Each error carries the HTTP status it maps to so that route handlers and the
application-level exception handler can render it without a lookup table.
Messages are safe to show to clients: they never contain tokens or secrets.
"""

from fastapi import status


class BridgeError(Exception):
    """Base class for all application errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"

    def __init__(self, message: str, *, upstream_status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.upstream_status = upstream_status


class MalformedRequest(BridgeError):
    """Required parameters are missing or badly formed."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "malformed_request"


class InvalidShopDomain(MalformedRequest):
    """The shop parameter is not a Shopify store domain."""

    code = "invalid_shop_domain"


class AuthenticationFailed(BridgeError):
    """HMAC signature did not match."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "authentication_failed"


class ReplayOrForgedState(BridgeError):
    """OAuth state was never issued, already consumed, expired or bound to another shop."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "invalid_state"


class ExchangeFailed(BridgeError):
    """The authorization code could not be exchanged for a token."""

    code = "exchange_failed"


class MetadataFetchFailed(BridgeError):
    """The token was issued but shop metadata could not be fetched."""

    code = "metadata_fetch_failed"


class MissingCredentials(BridgeError):
    """Wholesale catalog credentials are not configured."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "missing_credentials"


class ShopNotAuthenticated(BridgeError):
    """No access token is stored for the shop."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "shop_not_authenticated"


class CatalogError(BridgeError):
    """The wholesale catalog rejected or failed a request."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "catalog_error"


class ProductNotFound(BridgeError):
    """The requested product is not in the wholesale catalog."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "product_not_found"


class ShopifyAPIError(BridgeError):
    """The Shopify Admin API returned an error."""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "shopify_api_error"
