"""Random credential generation for Docker-backed services."""

from __future__ import annotations

import secrets
import string

ACCESS_KEY_LENGTH = 16
SECRET_KEY_LENGTH = 32
DEFAULT_PASSWORD_LENGTH = 16

_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def generate_access_key() -> str:
    """16 characters drawn from ``[A-Z0-9]`` (uppercased hex)."""
    return secrets.token_hex(12).upper()[:ACCESS_KEY_LENGTH]


def generate_secret_key() -> str:
    """32 characters drawn from ``[a-z0-9]`` (lowercase hex)."""
    return secrets.token_hex(SECRET_KEY_LENGTH // 2)


def generate_password(length: int = DEFAULT_PASSWORD_LENGTH) -> str:
    """Alphanumeric password, safe to embed in URLs and compose files."""
    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))


def generate_master_key() -> str:
    """Master/API key for search engines (32 hex characters)."""
    return secrets.token_hex(16)
