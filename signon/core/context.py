"""Immutable per-application wiring of settings, keys, and collaborators."""

import httpx
from pydantic import BaseModel, ConfigDict

from signon.core.settings import SSOSettings
from signon.crypto.keys import load_key_material
from signon.crypto.types import KeyMaterial
from signon.sso.cookie_store import SessionCookieStore
from signon.sso.profile_client import TokenExchangeClient, create_http_client
from signon.sso.session_manager import SessionStateManager


class SSOContext(BaseModel):
    """Everything a request handler needs, built once at startup."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    settings: SSOSettings
    key: KeyMaterial
    cookies: SessionCookieStore
    manager: SessionStateManager
    http_client: httpx.AsyncClient | None = None
    owns_http_client: bool = False

    async def aclose(self) -> None:
        """Release the pooled profile-fetch client if it was created here."""
        if self.http_client is not None and self.owns_http_client:
            await self.http_client.aclose()


def build_context(
    settings: SSOSettings, http_client: httpx.AsyncClient | None = None
) -> SSOContext:
    """Load key material and construct the handshake collaborators.

    Raises ``ConfigurationError`` or ``SigningError`` on unusable settings.
    """
    key = load_key_material(settings.key_id, settings.private_key, settings.key_path)
    cookies = SessionCookieStore(
        settings.cookie_name,
        settings.cookie_secret,
        secure=settings.is_secure,
        max_age=settings.cookie_ttl,
    )
    profile_client = None
    owns_http_client = False
    if settings.profile_fetch_enabled:
        if http_client is None:
            http_client = create_http_client(settings)
            owns_http_client = True
        profile_client = TokenExchangeClient(http_client, key)
    else:
        http_client = None
    manager = SessionStateManager(settings, key, profile_client)
    return SSOContext(
        settings=settings,
        key=key,
        cookies=cookies,
        manager=manager,
        http_client=http_client,
        owns_http_client=owns_http_client,
    )
