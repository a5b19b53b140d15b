"""Type definitions for SSO session state and per-request outcomes."""

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from signon.core.errors import ProfileFetchError, SSOError


class SessionState(BaseModel):
    """Durable result of a completed handshake, held in the session cookie."""

    token: str
    profile: dict[str, Any] = {}


class InboundRequest(BaseModel):
    """The parts of an inbound HTTP request the handshake looks at."""

    model_config = ConfigDict(frozen=True)

    scheme: str
    url: str
    token: str | None = None


class ProfileResult(BaseModel):
    """Outcome of a profile fetch: a profile or the error that prevented it."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    profile: dict[str, Any] | None = None
    error: ProfileFetchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class AuthState(StrEnum):
    """States of the per-request handshake.

    An ``AuthOutcome`` reports the state the request ended in. NO_SESSION and
    TOKEN_RECEIVED_PENDING_PROFILE are passed through on the way there and
    only show up in debug logs.
    """

    NO_SESSION = "no_session"
    TOKEN_RECEIVED_PENDING_PROFILE = "token_received_pending_profile"
    AUTHENTICATED = "authenticated"
    REDIRECT_REQUIRED = "redirect_required"
    FAILED = "failed"


class AuthOutcome(BaseModel):
    """What the hosting framework should do with the request."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    action: Literal["redirect", "continue", "fail"]
    state: AuthState
    target: str | None = None
    credentials: SessionState | None = None
    persist: bool = False
    error: SSOError | None = None
