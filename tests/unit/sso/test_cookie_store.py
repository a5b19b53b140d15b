"""Tests for the encrypted session cookie."""

import pytest
from cryptography.fernet import Fernet
from starlette.responses import Response

from signon.core.errors import ConfigurationError
from signon.sso.cookie_store import SessionCookieStore
from signon.sso.types import SessionState


@pytest.fixture
def store(cookie_secret: str) -> SessionCookieStore:
    return SessionCookieStore("sso", cookie_secret, secure=True, max_age=3600)


def _cookie_value(response: Response) -> str:
    header = response.headers["set-cookie"]
    return header.split(";", 1)[0].split("=", 1)[1].strip('"')


class TestSessionCookieStore:
    """Tests for SessionCookieStore."""

    def test_write_then_read(self, store: SessionCookieStore) -> None:
        state = SessionState(token="abc", profile={"id": "u1"})
        response = Response()
        store.write(response, state)
        assert store.read({"sso": _cookie_value(response)}) == state

    def test_cookie_attributes(self, store: SessionCookieStore) -> None:
        response = Response()
        store.write(response, SessionState(token="abc"))
        header = response.headers["set-cookie"].lower()
        assert "httponly" in header
        assert "secure" in header
        assert "samesite=lax" in header
        assert "max-age=3600" in header

    def test_token_not_readable_in_cookie(self, store: SessionCookieStore) -> None:
        response = Response()
        store.write(response, SessionState(token="plain-token-value"))
        assert "plain-token-value" not in response.headers["set-cookie"]

    def test_absent_cookie(self, store: SessionCookieStore) -> None:
        assert store.read({}) is None

    def test_tampered_cookie_ignored(self, store: SessionCookieStore) -> None:
        assert store.read({"sso": "forged"}) is None

    def test_other_secret_ignored(self, store: SessionCookieStore) -> None:
        other = SessionCookieStore(
            "sso", Fernet.generate_key().decode(), secure=True, max_age=3600
        )
        response = Response()
        other.write(response, SessionState(token="abc"))
        assert store.read({"sso": _cookie_value(response)}) is None

    def test_malformed_payload_ignored(
        self, store: SessionCookieStore, cookie_secret: str
    ) -> None:
        raw = Fernet(cookie_secret.encode()).encrypt(b'{"profile": {}}').decode()
        assert store.read({"sso": raw}) is None

    def test_clear_expires_cookie(self, store: SessionCookieStore) -> None:
        response = Response()
        store.clear(response)
        header = response.headers["set-cookie"].lower()
        assert header.startswith("sso=")
        assert "max-age=0" in header

    def test_missing_secret_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            SessionCookieStore("sso", "", secure=False, max_age=60)

    def test_invalid_secret_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            SessionCookieStore("sso", "too-short", secure=False, max_age=60)
