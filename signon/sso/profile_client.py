"""Token exchange: resolve a returned SSO token to the user's profile."""

import logging

import httpx

from signon.core.errors import ProfileFetchError
from signon.core.settings import SSOSettings
from signon.crypto.signer import build_signed_header
from signon.crypto.types import KeyMaterial
from signon.sso.types import ProfileResult

logger = logging.getLogger(__name__)

PROFILE_PATH = "/my"
LOGGED_BODY_LIMIT = 512


def create_http_client(settings: SSOSettings) -> httpx.AsyncClient:
    """Build the pooled client used for every profile fetch."""
    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        verify=settings.verify_tls,
        timeout=settings.profile_timeout,
    )


class TokenExchangeClient:
    """Calls the provider's profile endpoint with a time-signed request.

    Transport errors, timeouts and non-2xx answers come back as a
    ``ProfileResult`` carrying a ``ProfileFetchError``; only signing and
    configuration errors are raised.
    """

    def __init__(self, http_client: httpx.AsyncClient, key: KeyMaterial) -> None:
        self._http = http_client
        self._key = key

    async def fetch_profile(self, token: str) -> ProfileResult:
        """GET the profile for ``token``."""
        signed = build_signed_header(
            token, self._key.key_id, self._key.private_key
        )
        try:
            resp = await self._http.get(PROFILE_PATH, headers=signed.headers())
        except httpx.TimeoutException as exc:
            return _failure(ProfileFetchError(f"Profile fetch timed out: {exc!r}"))
        except httpx.HTTPError as exc:
            return _failure(ProfileFetchError(f"Profile fetch failed: {exc!r}"))

        if not resp.is_success:
            return _failure(
                ProfileFetchError(
                    f"Profile endpoint returned HTTP {resp.status_code}",
                    status_code=resp.status_code,
                    body=resp.text,
                )
            )
        try:
            payload = resp.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            return _failure(
                ProfileFetchError(
                    "Profile endpoint did not return a JSON object",
                    status_code=resp.status_code,
                    body=resp.text,
                )
            )
        return ProfileResult(profile=payload)


def _failure(error: ProfileFetchError) -> ProfileResult:
    logger.warning(
        "SSO profile fetch failed: %s body=%s",
        error,
        error.body[:LOGGED_BODY_LIMIT],
    )
    return ProfileResult(error=error)
