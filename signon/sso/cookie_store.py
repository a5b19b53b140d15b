"""Encrypted session cookie transport for SSO session state."""

import logging
from collections.abc import Mapping

from cryptography.fernet import Fernet, InvalidToken
from pydantic import ValidationError
from starlette.responses import Response

from signon.core.errors import ConfigurationError
from signon.sso.types import SessionState

logger = logging.getLogger(__name__)


class SessionCookieStore:
    """Reads and writes ``SessionState`` as a Fernet-encrypted cookie."""

    def __init__(
        self, cookie_name: str, secret: str, *, secure: bool, max_age: int
    ) -> None:
        if not secret:
            raise ConfigurationError("cookie_secret must be set to store sessions")
        try:
            self._cipher = Fernet(secret.encode())
        except ValueError as exc:
            raise ConfigurationError(
                f"cookie_secret is not a Fernet key: {exc}"
            ) from exc
        self.cookie_name = cookie_name
        self._secure = secure
        self._max_age = max_age

    def read(self, cookies: Mapping[str, str]) -> SessionState | None:
        """Return the stored state, or None when absent or not trustworthy."""
        raw = cookies.get(self.cookie_name)
        if not raw:
            return None
        try:
            plain = self._cipher.decrypt(raw.encode(), ttl=self._max_age)
            return SessionState.model_validate_json(plain)
        except InvalidToken:
            logger.warning("Ignoring invalid or expired %s cookie", self.cookie_name)
        except ValidationError:
            logger.warning("Ignoring malformed %s cookie payload", self.cookie_name)
        return None

    def write(self, response: Response, state: SessionState) -> None:
        """Persist ``state`` on the outgoing response."""
        value = self._cipher.encrypt(state.model_dump_json().encode()).decode()
        response.set_cookie(
            self.cookie_name,
            value,
            max_age=self._max_age,
            httponly=True,
            secure=self._secure,
            samesite="lax",
        )

    def clear(self, response: Response) -> None:
        """Invalidate the session held by the client."""
        response.delete_cookie(
            self.cookie_name,
            httponly=True,
            secure=self._secure,
            samesite="lax",
        )
