"""Error taxonomy for the SSO handshake."""


class SSOError(Exception):
    """Base class for all SSO handshake errors."""


class ConfigurationError(SSOError):
    """Fatal misconfiguration: missing key material, insecure transport."""


class SigningError(SSOError):
    """Cryptographic failure while loading a key or producing a signature."""


class ProfileFetchError(SSOError):
    """The provider's profile endpoint could not be reached or refused us."""

    def __init__(
        self, message: str, status_code: int | None = None, body: str = ""
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
