import logging
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from askanai.core.config import settings
from askanai.db.base import Base
from askanai import models  # noqa: F401  registers every table on Base.metadata

logger = logging.getLogger(__name__)

engine = create_async_engine(settings.DATABASE_URL,
                             echo=False,
                             pool_size=10,
                             max_overflow=20,
                             pool_timeout=30,
                             # recycle every hour (prevents stale connections)
                             pool_recycle=3600,
                             pool_pre_ping=True
                             )

async_session_factory = async_sessionmaker(
    bind=engine,
    autoflush=False,
    expire_on_commit=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides an async DB session
    and rolls back whatever the handler left uncommitted.
    """
    async with async_session_factory() as session:
        yield session
        await session.rollback()


async def init_db():
    """
    Create all tables from the ORM metadata. Development only, there are no migrations.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("created all tables")


async def dispose_db():
    await engine.dispose()
