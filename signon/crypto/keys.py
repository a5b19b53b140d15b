"""RSA key loading and generation for SSO request signing."""

from pathlib import Path

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import (
    RSAPrivateKey,
    RSAPublicKey,
)

from signon.core.errors import ConfigurationError, SigningError
from signon.crypto.types import KeyMaterial

RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537


def generate_rsa_keypair() -> tuple[str, str]:
    """Generate an RSA-2048 keypair as (private PEM, public PEM)."""
    private_key = rsa.generate_private_key(
        public_exponent=RSA_PUBLIC_EXPONENT,
        key_size=RSA_KEY_SIZE,
    )
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = (
        private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )
    return private_pem, public_pem


def load_rsa_private_key(private_key_pem: str) -> RSAPrivateKey:
    """Parse a PEM private key, rejecting anything that is not RSA."""
    try:
        loaded = serialization.load_pem_private_key(
            private_key_pem.encode(), password=None
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise SigningError(f"Malformed private key: {exc}") from exc
    if not isinstance(loaded, RSAPrivateKey):
        raise SigningError("Private key is not an RSA key")
    return loaded


def load_rsa_public_key(public_key_pem: str) -> RSAPublicKey:
    """Parse a PEM public key, rejecting anything that is not RSA."""
    try:
        loaded = serialization.load_pem_public_key(public_key_pem.encode())
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise SigningError(f"Malformed public key: {exc}") from exc
    if not isinstance(loaded, RSAPublicKey):
        raise SigningError("Public key is not an RSA key")
    return loaded


def load_key_material(
    key_id: str, private_key: str = "", key_path: str = ""
) -> KeyMaterial:
    """Load the signing key once at startup.

    An inline PEM takes precedence over ``key_path``. Missing or unreadable
    key material is a configuration error; a key that cannot be parsed is a
    signing error.
    """
    pem = private_key
    if not pem:
        if not key_path:
            raise ConfigurationError(
                "No private key configured: set private_key or key_path"
            )
        try:
            pem = Path(key_path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(
                f"Unable to read private key from {key_path}: {exc}"
            ) from exc
    return KeyMaterial(
        key_id=key_id, private_key_pem=pem, private_key=load_rsa_private_key(pem)
    )
