"""Encryption helpers for storing access tokens at rest."""

import base64
import hashlib
from functools import lru_cache

from cryptography.fernet import Fernet


@lru_cache(maxsize=4)
def _get_fernet(encryption_key: str) -> Fernet:
    """Get Fernet instance for an encryption key setting.

    Derives a valid 32-byte Fernet key from the configured key
    using SHA-256, then base64-encodes it.

    Note: Changing encryption_key will make previously encrypted tokens
    undecryptable.
    """
    key_bytes = hashlib.sha256(encryption_key.encode()).digest()
    return Fernet(base64.urlsafe_b64encode(key_bytes))


def encrypt_token(token: str, encryption_key: str) -> str:
    """Encrypt a token string."""
    f = _get_fernet(encryption_key)
    return f.encrypt(token.encode()).decode()


def decrypt_token(encrypted: str, encryption_key: str) -> str:
    """Decrypt an encrypted token string."""
    f = _get_fernet(encryption_key)
    return f.decrypt(encrypted.encode()).decode()
