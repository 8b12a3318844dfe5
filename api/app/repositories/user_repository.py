"""Persistence for user accounts."""

from typing import Any
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import ConflictError, NotFoundError
from app.logging_config import logger
from app.models.user import User


class UserRepository:
    """SQLAlchemy-backed repository for ``User`` rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user: User) -> User:
        """Insert a new account.

        Raises:
            ConflictError: If the email is already registered
        """
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("User insert violated a unique constraint", email=user.email, error=str(e))
            raise ConflictError("Email already exists")
        await self.db.refresh(user)
        return user

    async def get_by_email(self, email: str) -> User:
        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def get_by_id(self, user_id: int) -> User:
        stmt = (
            select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def update_profile(self, user_id: int, fields: dict[str, Any]) -> None:
        """Apply a partial profile update.

        Raises:
            NotFoundError: If no row was affected
            ConflictError: If the update violates a unique constraint
        """
        stmt = update(User).where(User.id == user_id).values(**fields)
        try:
            result = await self.db.execute(stmt)
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("User update violated a unique constraint", user_id=user_id, error=str(e))
            raise ConflictError("Email already exists")
        if result.rowcount == 0:
            raise NotFoundError("User not found")
