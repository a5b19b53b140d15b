"""Redirect target construction for unauthenticated requests."""

from collections.abc import Mapping
from typing import Any

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from signon.crypto.signer import sign_redirect_request


def build_redirect_url(
    provider_url: str,
    return_url: str,
    key_id: str,
    permissions: Mapping[str, Any] | None,
    private_key: RSAPrivateKey | str | None,
) -> str:
    """Signed provider URL that returns the browser to ``return_url``."""
    signed = sign_redirect_request(
        provider_url, return_url, key_id, permissions, private_key
    )
    return signed.redirect_url
