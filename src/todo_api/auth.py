from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from .schemas import UserLogin
from .settings import Settings

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)

DEMO_USERNAME = "demo"
DEMO_PASSWORD = "demo"


class TokenValidationError(Exception):
    """Raised when a bearer token is malformed, badly signed or expired."""


# PUBLIC_INTERFACE
def authenticate_demo_user(login: UserLogin) -> bool:
    """
    Demo credential check: only demo/demo is accepted.

    Replace with a real user store before exposing the service.
    """
    return login.username == DEMO_USERNAME and login.password == DEMO_PASSWORD


# PUBLIC_INTERFACE
def create_access_token(username: str, settings: Settings, now: Optional[datetime] = None) -> str:
    """
    Mint a signed bearer token for the given user.

    Claims:
    - sub: the username
    - exp: issue time plus settings.token_lifetime (one hour)
    """
    issued_at = now or datetime.now(timezone.utc)
    claims: Dict[str, Any] = {
        "sub": username,
        "exp": issued_at + settings.token_lifetime,
    }
    return jwt.encode(claims, settings.jwt_key, algorithm=settings.jwt_algorithm)


# PUBLIC_INTERFACE
def decode_access_token(token: str, settings: Settings) -> Dict[str, Any]:
    """
    Verify a bearer token and return its claims.

    Signature and lifetime are checked; exp and nbf tolerate settings.clock_skew.
    Issuer and audience are not validated.

    Raises:
        TokenValidationError if the token cannot be trusted.
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_key,
            algorithms=[settings.jwt_algorithm],
            options={
                "verify_aud": False,
                "verify_iss": False,
                "require_exp": True,
                "leeway": int(settings.clock_skew.total_seconds()),
            },
        )
    except ExpiredSignatureError as e:
        raise TokenValidationError("Token has expired") from e
    except JWTError as e:
        raise TokenValidationError(f"Invalid token: {e}") from e


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# PUBLIC_INTERFACE
def get_bearer_auth_dependency():
    """
    Return a FastAPI dependency callable that guards a route with bearer token auth.

    Behavior:
    - Missing Authorization header, or a scheme other than Bearer: 401.
    - Bad signature, malformed token, or expiry beyond the clock skew: 401.
    - Otherwise the token subject is returned to the route.

    Usage:
        from .auth import get_bearer_auth_dependency
        require_bearer = get_bearer_auth_dependency()
        @router.get("/secure/...", dependencies=[Depends(require_bearer)]) ...
    """

    async def _enforce(
        request: Request,
        creds: Optional[HTTPAuthorizationCredentials] = Depends(_security),
    ) -> Optional[str]:
        """
        Enforce bearer authentication.

        Raises:
            HTTPException(401) if the token is missing or invalid.
        """
        if creds is None or not creds.credentials:
            logger.debug("Rejected %s: no bearer token", request.url.path)
            raise _unauthorized("Not authenticated")

        settings: Settings = request.app.state.settings
        try:
            claims = decode_access_token(creds.credentials, settings)
        except TokenValidationError as e:
            logger.debug("Rejected %s: %s", request.url.path, e)
            raise _unauthorized(str(e)) from e
        return claims.get("sub")

    return _enforce
