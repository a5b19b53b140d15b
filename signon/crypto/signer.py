"""Canonical query construction and RSA-SHA256 signing for SSO requests."""

import base64
import binascii
import json
import math
import secrets
from collections.abc import Mapping
from datetime import UTC, datetime
from email.utils import format_datetime
from typing import Any
from urllib.parse import quote, unquote

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from signon.core.errors import ConfigurationError, SigningError
from signon.crypto.keys import load_rsa_private_key, load_rsa_public_key
from signon.crypto.types import URI_COMPONENT_SAFE, SignedHeader, SignedRequest

NONCE_LENGTH = 7

# JSON.stringify switches integral numbers to exponent form from here on.
JS_EXPONENT_THRESHOLD = 1e21

# Alphabetical; the signature covers the encoded string, so order is fixed.
CANONICAL_FIELDS = (
    "cid",
    "company",
    "country",
    "email",
    "firstName",
    "keyid",
    "lastName",
    "nonce",
    "now",
    "permissions",
    "returnto",
    "state",
)


def encode_component(value: str) -> str:
    """Percent-encode a value the way encodeURIComponent does."""
    return quote(value, safe=URI_COMPONENT_SAFE)


def http_date(moment: datetime | None = None) -> str:
    """Render a timestamp as an RFC 7231 HTTP-date in GMT."""
    moment = moment or datetime.now(UTC)
    return format_datetime(moment.astimezone(UTC), usegmt=True)


def generate_nonce(length: int = NONCE_LENGTH) -> str:
    """Random URL-safe string used once per redirect."""
    return secrets.token_urlsafe(length)[:length]


def _js_json_value(value: Any) -> Any:
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value.is_integer() and abs(value) < JS_EXPONENT_THRESHOLD:
            return int(value)
        return value
    if isinstance(value, Mapping):
        return {key: _js_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_js_json_value(item) for item in value]
    return value


def serialize_permissions(permissions: Mapping[str, Any] | None) -> str:
    """Compact JSON for the ``permissions`` field, as JSON.stringify writes it.

    Non-ASCII text is kept literal and integral floats lose their ``.0``;
    ``{}`` when unset.
    """
    return json.dumps(
        _js_json_value(dict(permissions or {})),
        separators=(",", ":"),
        ensure_ascii=False,
    )


def canonical_query(
    key_id: str,
    nonce: str,
    now: str,
    permissions: Mapping[str, Any] | None,
    return_url: str,
) -> str:
    """Build the form-encoded redirect query in canonical field order."""
    fields = dict.fromkeys(CANONICAL_FIELDS, "")
    fields["keyid"] = key_id
    fields["nonce"] = nonce
    fields["now"] = now
    fields["permissions"] = serialize_permissions(permissions)
    fields["returnto"] = return_url
    return "&".join(
        f"{encode_component(name)}={encode_component(fields[name])}"
        for name in CANONICAL_FIELDS
    )


def _resolve_key(private_key: RSAPrivateKey | str | None) -> RSAPrivateKey:
    """Return a parsed key; PEM strings are parsed here, once per call."""
    if not private_key:
        raise ConfigurationError("No private key configured for SSO signing")
    if isinstance(private_key, str):
        return load_rsa_private_key(private_key)
    return private_key


def _sign(message: str, key: RSAPrivateKey) -> str:
    try:
        raw = key.sign(message.encode(), padding.PKCS1v15(), hashes.SHA256())
    except (ValueError, TypeError) as exc:
        raise SigningError(f"RSA-SHA256 signing failed: {exc}") from exc
    return base64.b64encode(raw).decode()


def sign_redirect_request(
    url: str,
    return_url: str,
    key_id: str,
    permissions: Mapping[str, Any] | None,
    private_key: RSAPrivateKey | str | None,
    *,
    nonce: str | None = None,
    now: str | None = None,
) -> SignedRequest:
    """Build and sign the canonical authentication request.

    The signing input is the percent-encoded form of the full URL
    (``url?query``), not the query alone. Pass the parsed key held by
    ``KeyMaterial`` on request paths; a PEM string is parsed on every call.
    """
    key = _resolve_key(private_key)
    nonce = nonce or generate_nonce()
    now = now or http_date()
    query = canonical_query(key_id, nonce, now, permissions, return_url)
    signature = _sign(encode_component(f"{url}?{query}"), key)
    return SignedRequest(
        url=url, query=query, now=now, nonce=nonce, signature=signature
    )


def sign_timestamp(timestamp: str, private_key: RSAPrivateKey | str | None) -> str:
    """Sign a bare HTTP-date string, returning a base64 signature."""
    return _sign(timestamp, _resolve_key(private_key))


def build_signed_header(
    token: str,
    key_id: str,
    private_key: RSAPrivateKey | str | None,
    now: datetime | None = None,
) -> SignedHeader:
    """Sign the current UTC time for an authenticated provider API call."""
    date = http_date(now)
    return SignedHeader(
        date=date,
        signature=sign_timestamp(date, private_key),
        key_id=key_id,
        token=token,
    )


def verify_signature(public_key_pem: str, message: str, signature_b64: str) -> bool:
    """Check a base64 RSA-SHA256 signature over ``message``."""
    key = load_rsa_public_key(public_key_pem)
    try:
        raw = base64.b64decode(signature_b64, validate=True)
        key.verify(raw, message.encode(), padding.PKCS1v15(), hashes.SHA256())
    except (InvalidSignature, binascii.Error, ValueError):
        return False
    return True


def verify_redirect_url(redirect_url: str, public_key_pem: str) -> bool:
    """Strip the trailing ``sig`` and verify it against the rest of the URL."""
    unsigned, sep, encoded_sig = redirect_url.rpartition("&sig=")
    if not sep:
        return False
    return verify_signature(
        public_key_pem, encode_component(unsigned), unquote(encoded_sig)
    )
