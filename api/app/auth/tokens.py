"""JWT access/refresh token issuance and validation."""

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import JWTError, jwt

from app.errors import InternalError, InvalidTokenError
from app.logging_config import logger

# Symmetric signing only; anything else in the token header is rejected.
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_LIFETIME = timedelta(minutes=15)
REFRESH_TOKEN_LIFETIME = timedelta(days=7)

REQUIRED_CLAIMS = ("sub", "email", "iat", "exp", "type")


class TokenType(str, enum.Enum):
    """Token kind discriminator carried in the ``type`` claim."""
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenClaims:
    """Decoded payload of a validated token."""

    user_id: int
    email: str
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = int(ACCESS_TOKEN_LIFETIME.total_seconds())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and validates signed, time-bounded token pairs.

    The signing secret is injected once at construction and never mutated, so a
    single instance is shared by all requests.

    Usage:
        >>> tokens = TokenService(secret_key=settings.jwt_secret_key)
        >>> pair = tokens.issue_pair(user.id, user.email)
        >>> claims = tokens.validate(pair.access_token, TokenType.ACCESS)
    """

    def __init__(self, secret_key: str, clock: Optional[Callable[[], datetime]] = None):
        if not secret_key:
            raise ValueError("JWT secret key must not be empty")
        self._secret_key = secret_key
        self._clock = clock or _utcnow

    def _encode(self, user_id: int, email: str, token_type: TokenType, lifetime: timedelta) -> str:
        issued_at = self._clock().replace(microsecond=0)
        payload = {
            "sub": str(user_id),
            "email": email,
            "type": token_type.value,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + lifetime).timestamp()),
            "jti": uuid.uuid4().hex,
        }
        try:
            return jwt.encode(payload, self._secret_key, algorithm=JWT_ALGORITHM)
        except (JWTError, TypeError, ValueError) as e:
            logger.error("Token signing failed", user_id=user_id, error=str(e))
            raise InternalError("Failed to sign token") from e

    def issue_pair(self, user_id: int, email: str) -> TokenPair:
        """Create an access token (15 minutes) and a refresh token (7 days).

        Args:
            user_id: Subject identifier
            email: Subject email

        Returns:
            Independently signed access and refresh tokens
        """
        return TokenPair(
            access_token=self._encode(user_id, email, TokenType.ACCESS, ACCESS_TOKEN_LIFETIME),
            refresh_token=self._encode(user_id, email, TokenType.REFRESH, REFRESH_TOKEN_LIFETIME),
        )

    def validate(self, token: str, expected_type: Optional[TokenType] = None) -> TokenClaims:
        """Verify signature, algorithm, expiry and payload shape.

        Expiry is checked against the service clock; a token is expired from
        the exact instant stored in ``exp`` onwards.

        Raises:
            InvalidTokenError: On any verification failure
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[JWT_ALGORITHM],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except JWTError as e:
            logger.warning("Token decode failed", error=str(e))
            raise InvalidTokenError() from e

        missing = [claim for claim in REQUIRED_CLAIMS if claim not in payload]
        if missing:
            logger.warning("Token missing claims", missing=missing)
            raise InvalidTokenError()

        try:
            claims = TokenClaims(
                user_id=int(payload["sub"]),
                email=str(payload["email"]),
                token_type=TokenType(payload["type"]),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
            )
        except (TypeError, ValueError) as e:
            logger.warning("Token payload malformed", error=str(e))
            raise InvalidTokenError() from e

        if self._clock() >= claims.expires_at:
            logger.warning("Token expired", user_id=claims.user_id, token_type=claims.token_type.value)
            raise InvalidTokenError("Token has expired")

        if expected_type is not None and claims.token_type != expected_type:
            logger.warning(
                "Unexpected token type",
                user_id=claims.user_id,
                expected=expected_type.value,
                actual=claims.token_type.value,
            )
            raise InvalidTokenError()

        return claims

    def refresh(self, refresh_token: str) -> str:
        """Exchange a refresh token for a new access token.

        The refresh token stays usable until it expires; there is no rotation
        or revocation list.
        """
        claims = self.validate(refresh_token, TokenType.REFRESH)
        return self.issue_pair(claims.user_id, claims.email).access_token
