"""Authentication routes: register, login, refresh."""

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, EmailStr, Field

from app.auth.service import AuthService
from app.config import settings
from app.dependencies import get_auth_service
from app.rate_limit import limiter

router = APIRouter()


# Request/Response models
class RegisterRequest(BaseModel):
    """User registration request."""

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128, description="Password (min 6 characters)")


class LoginRequest(BaseModel):
    """User login request."""

    email: EmailStr
    password: str


class RefreshTokenRequest(BaseModel):
    """Refresh token request."""

    refresh_token: str = Field(..., min_length=1, description="Refresh token to exchange for new access token")


class TokenResponse(BaseModel):
    """Token pair returned on login."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class AccessTokenResponse(BaseModel):
    """New access token returned on refresh."""

    access_token: str
    token_type: str = "bearer"


class RegisterResponse(BaseModel):
    message: str
    user_id: int


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.auth_rate_limit)
async def register(
    request: Request,
    body: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """Register a new user with email and password.

    Raises:
        ConflictError: 409 if the email is already registered
    """
    user = await auth.register(body.email, body.password)
    return RegisterResponse(message="User registered successfully", user_id=user.id)


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.auth_rate_limit)
async def login(
    request: Request,
    body: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """Login with email and password.

    Raises:
        InvalidCredentialsError: 401, identical for unknown email and wrong password
    """
    pair = await auth.login(body.email, body.password)
    return TokenResponse(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        token_type=pair.token_type,
        expires_in=pair.expires_in,
    )


@router.post("/refresh-token", response_model=AccessTokenResponse)
async def refresh_token(
    body: RefreshTokenRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """Exchange a refresh token for a new access token.

    Raises:
        InvalidTokenError: 401 if the refresh token is invalid or expired
    """
    access_token = await auth.refresh_access_token(body.refresh_token)
    return AccessTokenResponse(access_token=access_token)
