"""FastAPI dependency injection for SSO-protected routes."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Response, status

from signon.core.context import SSOContext
from signon.core.errors import ProfileFetchError
from signon.sso.types import InboundRequest, SessionState

logger = logging.getLogger(__name__)

TOKEN_QUERY_PARAM = "token"


def get_context(request: Request) -> SSOContext:
    return request.app.state.sso


async def require_session(
    request: Request,
    response: Response,
    context: Annotated[SSOContext, Depends(get_context)],
) -> SessionState:
    """Authenticate the request via SSO, redirecting when there is no session."""
    inbound = InboundRequest(
        scheme=request.url.scheme,
        url=str(request.url),
        token=request.query_params.get(TOKEN_QUERY_PARAM),
    )
    existing = context.cookies.read(request.cookies)
    outcome = await context.manager.authenticate(inbound, existing)

    if outcome.action == "redirect":
        raise HTTPException(
            status_code=status.HTTP_302_FOUND,
            headers={"Location": outcome.target or ""},
        )
    if outcome.action == "fail" or outcome.credentials is None:
        if isinstance(outcome.error, ProfileFetchError):
            logger.warning("Profile required but unavailable: %s", outcome.error)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="profile_unavailable",
            )
        logger.error("SSO authentication failed: %s", outcome.error)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="server_error",
        )

    if outcome.persist:
        context.cookies.write(response, outcome.credentials)
    return outcome.credentials
