"""Shared test fixtures for signon."""

from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx
import pytest
from cryptography.fernet import Fernet
from fastapi import FastAPI, Request
from starlette.responses import JSONResponse

from signon.core.settings import SSOSettings
from signon.crypto.keys import generate_rsa_keypair
from signon.crypto.signer import verify_signature

KEY_ID = "k1"
PROVIDER_URL = "https://sso.example/login"
API_BASE_URL = "https://api.sso.example"
PROFILE = {"id": "user-1", "email": "alice@example.com", "firstName": "Alice"}

ProviderFactory = Callable[..., FastAPI]


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host SSO_* variables out of test settings."""
    for name in ("SSO_IS_SECURE", "SSO_API_BASE_URL", "SSO_REQUIRE_PROFILE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="session")
def keypair() -> tuple[str, str]:
    """One RSA keypair per test session; generation is slow."""
    return generate_rsa_keypair()


@pytest.fixture
def private_pem(keypair: tuple[str, str]) -> str:
    return keypair[0]


@pytest.fixture
def public_pem(keypair: tuple[str, str]) -> str:
    return keypair[1]


@pytest.fixture
def cookie_secret() -> str:
    return Fernet.generate_key().decode()


@pytest.fixture
def settings(private_pem: str, cookie_secret: str) -> SSOSettings:
    """Settings with profile fetch disabled."""
    return SSOSettings(
        url=PROVIDER_URL,
        key_id=KEY_ID,
        private_key=private_pem,
        cookie_secret=cookie_secret,
        permissions={"read": True},
    )


@pytest.fixture
def provider_factory(public_pem: str) -> ProviderFactory:
    """Build a stub identity provider exposing GET /my."""

    def _make(
        profile: Any = None, status_code: int = 200
    ) -> FastAPI:
        app = FastAPI()
        app.state.calls = []

        @app.get("/my")
        async def my(request: Request) -> JSONResponse:
            app.state.calls.append(dict(request.headers))
            signature = request.headers.get("authorization", "").rsplit(" ", 1)[-1]
            date = request.headers.get("date", "")
            if not verify_signature(public_pem, date, signature):
                return JSONResponse({"error": "invalid_signature"}, status_code=401)
            if status_code != 200:
                return JSONResponse({"error": "unavailable"}, status_code=status_code)
            return JSONResponse(PROFILE if profile is None else profile)

        return app

    return _make


@pytest.fixture
def provider_app(provider_factory: ProviderFactory) -> FastAPI:
    return provider_factory()


@pytest.fixture
async def provider_client(provider_app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    """An httpx client routed to the stub provider."""
    transport = httpx.ASGITransport(app=provider_app)
    async with httpx.AsyncClient(transport=transport, base_url=API_BASE_URL) as ac:
        yield ac
