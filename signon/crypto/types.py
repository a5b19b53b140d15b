"""Type definitions for key material and signed SSO requests."""

from urllib.parse import quote

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from pydantic import BaseModel, ConfigDict, Field

# Characters JavaScript's encodeURIComponent leaves alone, beyond quote()'s own.
URI_COMPONENT_SAFE = "!*'()"

API_VERSION = "~8"
SIGNATURE_ALGORITHM = "rsa-sha256"


class KeyMaterial(BaseModel):
    """The RSA private key used to sign outbound SSO requests.

    ``private_key`` is the parsed form of ``private_key_pem``, loaded once by
    ``load_key_material`` and reused for every signature.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key_id: str
    private_key_pem: str = Field(repr=False)
    private_key: RSAPrivateKey | None = Field(default=None, repr=False, exclude=True)


class SignedRequest(BaseModel):
    """A canonical redirect query and its signature."""

    model_config = ConfigDict(frozen=True)

    url: str
    query: str
    now: str
    nonce: str
    signature: str

    @property
    def unsigned_url(self) -> str:
        """Provider URL plus canonical query, i.e. what was signed."""
        return f"{self.url}?{self.query}"

    @property
    def redirect_url(self) -> str:
        """Final redirect target with the trailing ``sig`` parameter."""
        sig = quote(self.signature, safe=URI_COMPONENT_SAFE)
        return f"{self.unsigned_url}&sig={sig}"


class SignedHeader(BaseModel):
    """Time-bound signature plus bearer token for the profile call."""

    model_config = ConfigDict(frozen=True)

    date: str
    signature: str
    key_id: str
    token: str

    def headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "x-api-version": API_VERSION,
            "Date": self.date,
            "Authorization": (
                f'Signature keyId="{self.key_id}",'
                f'algorithm="{SIGNATURE_ALGORITHM}" {self.signature}'
            ),
            "X-Auth-Token": self.token,
        }
