"""SQLAlchemy ORM models for the music catalog API."""

from app.models.base import Base
from app.models.music import Music, MEDIA_SLOTS
from app.models.user import User

__all__ = [
    "Base",
    "Music",
    "MEDIA_SLOTS",
    "User",
]
