"""SSO session endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from signon.api.deps import get_context, require_session
from signon.core.context import SSOContext
from signon.sso.types import SessionState

router = APIRouter(prefix="/sso")


@router.get("/session")
async def session(
    credentials: Annotated[SessionState, Depends(require_session)],
) -> SessionState:
    """GET /sso/session -- credentials of the signed-in user."""
    return credentials


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    context: Annotated[SSOContext, Depends(get_context)],
) -> Response:
    """POST /sso/logout -- drop the client-held session."""
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    context.cookies.clear(response)
    return response
