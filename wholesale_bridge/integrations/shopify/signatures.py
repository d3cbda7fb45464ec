"""HMAC signing and verification for OAuth redirects and webhook bodies.

Shopify signs two kinds of inbound requests with the app's shared secret:

- OAuth redirects carry an ``hmac`` query parameter: a hex HMAC-SHA256 of
  the remaining query parameters, sorted by key and url-encoded as
  ``key=value`` pairs joined by ``&``.
- Webhooks carry an ``X-Shopify-Hmac-Sha256`` header: a base64 HMAC-SHA256
  of the raw request body, byte for byte.

Both go through :func:`verify`, which differs between the two only in the
canonical message and the digest encoding.
"""

import base64
import enum
import hashlib
import hmac
from collections.abc import Mapping
from urllib.parse import urlencode

# Parameters excluded from the signed OAuth message
SIGNATURE_PARAMS = frozenset({"hmac", "signature"})


class Verdict(enum.StrEnum):
    AUTHENTIC = "authentic"
    FORGED = "forged"


class DigestEncoding(enum.StrEnum):
    HEX = "hex"
    BASE64 = "base64"


def canonical_query(params: Mapping[str, str]) -> bytes:
    """Serialize callback params the way Shopify does before signing."""
    remaining = sorted((k, v) for k, v in params.items() if k not in SIGNATURE_PARAMS)
    return urlencode(remaining).encode("utf-8")


def compute_digest(message: bytes, secret: str, encoding: DigestEncoding) -> str:
    """HMAC-SHA256 of ``message`` in the requested encoding."""
    mac = hmac.new(secret.encode("utf-8"), message, hashlib.sha256)
    if encoding is DigestEncoding.HEX:
        return mac.hexdigest()
    return base64.b64encode(mac.digest()).decode("utf-8")


def verify(message: bytes, provided: str | None, secret: str, encoding: DigestEncoding) -> Verdict:
    """Compare a provided signature to the locally computed one in constant time."""
    if not provided or not secret:
        return Verdict.FORGED
    computed = compute_digest(message, secret, encoding)
    if hmac.compare_digest(computed.encode("utf-8"), provided.encode("utf-8")):
        return Verdict.AUTHENTIC
    return Verdict.FORGED


def sign_query(params: Mapping[str, str], secret: str) -> str:
    return compute_digest(canonical_query(params), secret, DigestEncoding.HEX)


def verify_query(params: Mapping[str, str], secret: str) -> Verdict:
    """Verify an OAuth redirect's ``hmac`` parameter.

    Args:
        params: All query parameters received, including ``hmac``.
        secret: The Shopify API secret.

    Returns:
        ``Verdict.AUTHENTIC`` if the signature matches.
    """
    return verify(canonical_query(params), params.get("hmac"), secret, DigestEncoding.HEX)


def sign_body(body: bytes, secret: str) -> str:
    return compute_digest(body, secret, DigestEncoding.BASE64)


def verify_body(body: bytes, hmac_header: str | None, secret: str) -> Verdict:
    """Verify a webhook's ``X-Shopify-Hmac-Sha256`` header against the raw body."""
    return verify(body, hmac_header, secret, DigestEncoding.BASE64)
