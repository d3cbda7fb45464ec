"""Shopify OAuth endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, Request, status
from fastapi.responses import RedirectResponse

from wholesale_bridge.core.deps import Credentials, States
from wholesale_bridge.core.rate_limit import auth_rate_limit, limiter
from wholesale_bridge.schemas.common import ErrorResponse
from wholesale_bridge.services.authorization import AuthorizationInitiator
from wholesale_bridge.services.callback import CallbackExchanger

router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    }
)


@router.get("")
@router.get("/authorize")
@limiter.limit(auth_rate_limit)
async def authorize(
    request: Request,  # noqa: ARG001 - required by slowapi
    states: States,
    shop: Annotated[str | None, Query()] = None,
) -> RedirectResponse:
    """Start Shopify OAuth by redirecting to the shop's consent screen."""
    url = await AuthorizationInitiator(states).start(shop)
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.get("/callback")
@limiter.limit(auth_rate_limit)
async def callback(
    request: Request,
    credentials: Credentials,
    states: States,
) -> RedirectResponse:
    """Handle the Shopify OAuth callback.

    All query parameters are passed through untouched because the HMAC covers
    every one of them, including ones this app does not use (``host``,
    ``timestamp``).
    """
    result = await CallbackExchanger(credentials, states).complete(dict(request.query_params))
    if result.metadata_error:
        # The credential is committed; report the partial failure distinctly.
        raise result.metadata_error
    return RedirectResponse(result.redirect_url, status_code=status.HTTP_302_FOUND)
