"""Persistence for catalog records."""

from typing import Any, List
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import NotFoundError
from app.models.music import Music


class MusicRepository:
    """SQLAlchemy-backed repository for ``Music`` rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, music: Music) -> Music:
        self.db.add(music)
        await self.db.flush()
        await self.db.refresh(music)
        return music

    async def get_by_id(self, music_id: int) -> Music:
        stmt = (
            select(Music)
            .where(Music.id == music_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        music = result.scalar_one_or_none()
        if music is None:
            raise NotFoundError("Music not found")
        return music

    async def get_all(self) -> List[Music]:
        result = await self.db.execute(select(Music).order_by(Music.id))
        return list(result.scalars().all())

    async def update(self, music_id: int, values: dict[str, Any]) -> None:
        """Write ``values`` onto the row; a missing row is an error, not a no-op."""
        stmt = update(Music).where(Music.id == music_id).values(**values)
        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            raise NotFoundError("Music not found")

    async def delete(self, music_id: int) -> None:
        result = await self.db.execute(delete(Music).where(Music.id == music_id))
        if result.rowcount == 0:
            raise NotFoundError("Music not found")
