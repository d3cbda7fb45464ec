"""Schemas for stored shop credentials and pending OAuth state."""

from datetime import UTC, datetime

from pydantic import Field, SecretStr

from wholesale_bridge.schemas.common import BaseSchema


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ShopCredential(BaseSchema):
    """The live Admin API token for one shop.

    ``access_token`` is a ``SecretStr`` so that ``repr()``, logging and
    serialization never expose it; call ``get_secret_value()`` at the point
    of use.
    """

    shop_domain: str
    access_token: SecretStr
    scope: str = ""
    issued_at: datetime = Field(default_factory=_utcnow)


class AuthorizationState(BaseSchema):
    """A pending OAuth request awaiting its callback."""

    nonce: str
    shop_domain: str
    issued_at: datetime = Field(default_factory=_utcnow)


class ShopMetadata(BaseSchema):
    """Subset of ``shop.json`` kept after installation."""

    name: str | None = None
    email: str | None = None
    domain: str | None = None
