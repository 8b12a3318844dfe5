"""Authentication dependency for bearer JWT verification.

User identity is taken from the access token itself; no database lookup is
made on the request path.
"""

from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.auth.tokens import TokenService, TokenType
from app.dependencies import get_token_service
from app.errors import InvalidTokenError
from app.logging_config import bind_user_context, logger

# auto_error is off so a missing header yields 401 (not 403) with our message
security = HTTPBearer(auto_error=False)


class AuthUser:
    """Authenticated user context extracted from the access token."""

    def __init__(self, user_id: int, email: str):
        self.user_id = user_id
        self.email = email

    def __repr__(self):
        return f"<AuthUser(user_id={self.user_id}, email={self.email})>"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_token_service),
) -> AuthUser:
    """Get current authenticated user from the bearer access token.

    Args:
        credentials: HTTP Bearer credentials (None if header missing or not Bearer)
        tokens: Token service

    Returns:
        Authenticated user context

    Raises:
        HTTPException: 401 if the header is missing/malformed or the token is invalid
    """
    if credentials is None or not credentials.credentials:
        logger.warning("Missing or malformed authorization header")
        raise _unauthorized("Authorization header is required")

    try:
        claims = tokens.validate(credentials.credentials, TokenType.ACCESS)
    except InvalidTokenError as e:
        raise _unauthorized(e.message)

    bind_user_context(claims.user_id, claims.email)
    return AuthUser(user_id=claims.user_id, email=claims.email)
