"""FastAPI application factory for SSO-protected services."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from signon.api.routes_session import router as session_router
from signon.core.context import build_context
from signon.core.settings import SSOSettings


def create_app(
    settings: SSOSettings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application."""
    context = build_context(settings or SSOSettings(), http_client)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        await context.aclose()

    app = FastAPI(
        title="signon",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.sso = context
    app.include_router(session_router)

    return app
