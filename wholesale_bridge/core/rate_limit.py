"""Rate limiting for the browser-facing OAuth routes using slowapi."""

from slowapi import Limiter
from starlette.requests import Request

from wholesale_bridge.core.config import settings


def _get_real_client_ip(request: Request) -> str:
    """Client IP, honouring the first X-Forwarded-For hop when proxied."""
    forwarded = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    if forwarded:
        return forwarded
    return request.client.host if request.client else "127.0.0.1"


def auth_rate_limit() -> str:
    """Limit applied to /auth routes, read at request time so tests can patch it."""
    return settings.rate_limit_auth


limiter = Limiter(key_func=_get_real_client_ip)
