"""Music catalog model."""

from sqlalchemy import Column, Integer, String, Text, TIMESTAMP, func
from app.models.base import Base

# Media slot name -> locator column. Order is the upload order.
MEDIA_SLOTS = ("audio", "video", "image")


class Music(Base):
    """Catalog record with optional audio, video and image locators."""

    __tablename__ = "musics"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    artist = Column(String(255), nullable=False)
    lyrics = Column(Text, nullable=True)
    audio_url = Column(String(1024), nullable=True)
    video_url = Column(String(1024), nullable=True)
    image_url = Column(String(1024), nullable=True)
    created_by = Column(String(255), nullable=False, server_default="system")
    updated_by = Column(String(255), nullable=False, server_default="system")
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), index=True)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def locators(self) -> dict[str, str]:
        """Non-empty locators keyed by slot name."""
        return {
            slot: getattr(self, f"{slot}_url")
            for slot in MEDIA_SLOTS
            if getattr(self, f"{slot}_url")
        }

    def __repr__(self):
        return f"<Music(id={self.id}, title={self.title})>"
