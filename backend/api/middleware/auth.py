"""
Bearer-token authentication for TrustCircle routes.

Every connection and vault operation acts on behalf of the caller, so the
caller's user ID must come from a verified Supabase access token, never
from the request body. Display fields (name, avatar) are read from the
token's user_metadata and become the Identity that request snapshots and
profiles are built from.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from shared.models import Identity

from ..config import get_settings
from ..models.user import AuthenticatedUser, TokenPayload

logger = logging.getLogger(__name__)

# Supabase signs access tokens with the project's JWT secret
JWT_ALGORITHMS = ["HS256"]
JWT_AUDIENCE = "authenticated"

bearer_scheme = HTTPBearer(auto_error=False)


class AuthError(HTTPException):
    """401 with a Bearer challenge."""
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


def decode_token(token: str) -> TokenPayload:
    """
    Verify a Supabase access token and return its claims.

    Args:
        token: Raw JWT from the Authorization header

    Returns:
        TokenPayload with the verified claims

    Raises:
        AuthError: If the server has no JWT secret, or the token is
            expired, malformed or signed with another secret
    """
    secret = get_settings().supabase_jwt_secret
    if not secret:
        logger.error("TRUSTCIRCLE_SUPABASE_JWT_SECRET is not set; rejecting all tokens")
        raise AuthError("Server authentication not configured")

    try:
        claims = jwt.decode(token, secret, algorithms=JWT_ALGORITHMS, audience=JWT_AUDIENCE)
    except jwt.ExpiredSignatureError:
        raise AuthError("Token has expired")
    except JWTError as e:
        logger.debug(f"Rejected bearer token: {e}")
        raise AuthError(f"Invalid token: {str(e)}")
    return TokenPayload(**claims)


def get_user_from_payload(payload: TokenPayload) -> AuthenticatedUser:
    """Build the request's user from verified claims."""
    return AuthenticatedUser(
        id=payload.sub,
        email=payload.email,
        email_verified=payload.email_confirmed_at is not None,
        name=payload.display_name,
        picture=payload.picture,
        last_sign_in=datetime.fromtimestamp(payload.iat, tz=timezone.utc),
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthenticatedUser:
    """
    Require a valid bearer token.

    Usage:
        @router.get("/api/connections")
        async def list_connections(user: AuthenticatedUser = Depends(get_current_user)):
            ...
    """
    if credentials is None:
        raise AuthError("Missing authorization header")

    return get_user_from_payload(decode_token(credentials.credentials))


async def get_current_identity(
    user: AuthenticatedUser = Depends(get_current_user),
) -> Identity:
    """The caller as an Identity, for profile sync and request snapshots."""
    return user.to_identity()
