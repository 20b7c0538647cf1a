from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, status

from ..auth import authenticate_demo_user, create_access_token
from ..schemas import TokenResponse, UserLogin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# PUBLIC_INTERFACE
@router.post(
    "/token",
    response_model=TokenResponse,
    name="GetToken",
    summary="Issue bearer token",
    description="Exchange demo credentials (demo/demo) for a JWT valid for one hour.",
    responses={
        200: {"description": "Token issued"},
        401: {"description": "Invalid credentials"},
    },
)
def issue_token(login: UserLogin, request: Request) -> TokenResponse:
    """
    Validate the credentials and return a signed token.
    """
    if not authenticate_demo_user(login):
        logger.info("Token request rejected for user %r", login.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    token = create_access_token(login.username, request.app.state.settings)
    logger.info("Issued token for user %r", login.username)
    return TokenResponse(token=token)
