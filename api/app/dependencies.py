"""FastAPI dependency providers wiring repositories, storage and services."""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.service import AuthService
from app.auth.tokens import TokenService
from app.config import settings
from app.db import get_db
from app.music.service import MusicService
from app.repositories.music_repository import MusicRepository
from app.repositories.user_repository import UserRepository
from app.storage.base import StorageBackend
from app.storage.factory import get_storage_backend
from app.users.service import UserService


@lru_cache
def get_token_service() -> TokenService:
    """Process-wide token service holding the signing secret."""
    return TokenService(secret_key=settings.jwt_secret_key)


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(UserRepository(db), tokens, timeout=settings.request_timeout_seconds)


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(UserRepository(db), timeout=settings.request_timeout_seconds)


def get_music_service(
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage_backend),
) -> MusicService:
    return MusicService(MusicRepository(db), storage, timeout=settings.request_timeout_seconds)
