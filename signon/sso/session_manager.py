"""Per-request SSO handshake state machine."""

import logging

from signon.core.errors import (
    ConfigurationError,
    ProfileFetchError,
    SigningError,
    SSOError,
)
from signon.core.settings import SSOSettings
from signon.crypto.types import KeyMaterial
from signon.sso.profile_client import TokenExchangeClient
from signon.sso.redirect import build_redirect_url
from signon.sso.types import AuthOutcome, AuthState, InboundRequest, SessionState

logger = logging.getLogger(__name__)

INSECURE_TRANSPORT_MESSAGE = (
    "Invalid setting - is_secure must be set to false for non-https server"
)


class SessionStateManager:
    """Decides, per request, between redirect, continue and fail.

    NO_SESSION moves to REDIRECT_REQUIRED, or to TOKEN_RECEIVED_PENDING_PROFILE
    when the provider handed back a token. An existing session goes straight
    to AUTHENTICATED without signing or fetching anything.
    """

    def __init__(
        self,
        settings: SSOSettings,
        key: KeyMaterial | None,
        profile_client: TokenExchangeClient | None = None,
    ) -> None:
        self._settings = settings
        self._key = key
        self._profile_client = profile_client

    async def authenticate(
        self, request: InboundRequest, existing: SessionState | None
    ) -> AuthOutcome:
        """Run the handshake for one inbound request."""
        if self._settings.is_secure and request.scheme != "https":
            logger.error(
                "Rejected %s request: %s", request.scheme, INSECURE_TRANSPORT_MESSAGE
            )
            return _fail(ConfigurationError(INSECURE_TRANSPORT_MESSAGE))

        if existing is not None and existing.token:
            return AuthOutcome(
                action="continue",
                state=AuthState.AUTHENTICATED,
                credentials=existing,
            )

        logger.debug("SSO state %s", AuthState.NO_SESSION)
        try:
            if request.token:
                return await self._resolve_token(request.token)
            return self._redirect(request)
        except (ConfigurationError, SigningError) as exc:
            logger.error("SSO handshake failed: %s", exc)
            return _fail(exc)

    async def _resolve_token(self, token: str) -> AuthOutcome:
        logger.debug("SSO state %s", AuthState.TOKEN_RECEIVED_PENDING_PROFILE)
        profile: dict = {}
        error: ProfileFetchError | None = None
        if self._profile_client is None:
            logger.debug("No profile endpoint configured, skipping fetch")
        else:
            result = await self._profile_client.fetch_profile(token)
            if result.ok:
                profile = result.profile or {}
            elif self._settings.require_profile:
                return _fail(result.error)
            else:
                error = result.error
                logger.warning("Continuing SSO login without profile: %s", error)

        logger.info("SSO session established")
        return AuthOutcome(
            action="continue",
            state=AuthState.AUTHENTICATED,
            credentials=SessionState(token=token, profile=profile),
            persist=True,
            error=error,
        )

    def _redirect(self, request: InboundRequest) -> AuthOutcome:
        key_id = self._key.key_id if self._key else self._settings.key_id
        private_key = self._key.private_key if self._key else None
        target = build_redirect_url(
            self._settings.url,
            request.url,
            key_id,
            self._settings.permissions,
            private_key,
        )
        logger.info("Redirecting unauthenticated request to SSO provider")
        return AuthOutcome(
            action="redirect",
            state=AuthState.REDIRECT_REQUIRED,
            target=target,
        )


def _fail(error: SSOError | None) -> AuthOutcome:
    return AuthOutcome(action="fail", state=AuthState.FAILED, error=error)
