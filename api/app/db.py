"""Database connection and session management."""

from typing import AsyncGenerator
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool
from fastapi import HTTPException
from app.config import settings
from app.errors import AppError
from app.logging_config import logger

# Convert postgres:// to postgresql+asyncpg://
DATABASE_URL = (
    settings.postgres_url
    .replace("postgres://", "postgresql://", 1)
    .replace("postgresql://", "postgresql+asyncpg://", 1)
)

# Create async engine
if settings.debug:
    # NullPool for debug mode - no pooling parameters needed
    engine = create_async_engine(
        DATABASE_URL,
        echo=True,
        poolclass=NullPool,
    )
else:
    engine = create_async_engine(
        DATABASE_URL,
        echo=False,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )

# Create async session maker
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session.

    Usage:
        @router.get("/endpoint")
        async def endpoint(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except (HTTPException, AppError):
            # Application-level errors (auth, not found, storage...) are
            # already logged where they were raised
            await session.rollback()
            raise
        except Exception as e:
            await session.rollback()
            logger.error("Database session error", error=str(e), exc_info=True)
            raise


async def init_db():
    """Check the database connection at startup."""
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            logger.info("Database connection established", url=DATABASE_URL.split("@")[-1])
    except Exception as e:
        logger.error("Failed to connect to database", error=str(e), exc_info=True)
        raise


async def close_db():
    """Close database connection pool."""
    await engine.dispose()
    logger.info("Database connection closed")
