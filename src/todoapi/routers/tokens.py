from __future__ import annotations

from fastapi import APIRouter, Request

from ..auth import issue_access_token
from ..schemas import TokenOut
from ..settings import Settings

router = APIRouter(tags=["auth"])


# PUBLIC_INTERFACE
@router.get(
    "/tokenz",
    response_model=TokenOut,
    summary="Issue Token",
    description="Issue a short-lived HS256 access token signed with the SIGN secret.",
)
def issue_token(request: Request) -> TokenOut:
    """
    Issue an access token. No credentials are required.
    """
    settings: Settings = request.app.state.settings
    token = issue_access_token(
        secret=settings.sign_secret,
        audience=settings.token_audience,
        ttl_seconds=settings.token_ttl_seconds,
    )
    return TokenOut(token=token)
