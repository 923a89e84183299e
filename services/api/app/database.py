"""
Async SQLAlchemy engine + session factory for the stellar store on TiDB.

Every connection pins its session time zone to UTC, so anything the
database itself stamps or compares agrees with the UTC ranking windows.
Ranking reads take no locks; each request gets its own session, and the
likes endpoints commit through the same dependency.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.tidb_url,
    pool_pre_ping=True,
    pool_size=settings.tidb_pool_size,
    max_overflow=settings.tidb_max_overflow,
    # TiDB closes idle connections; recycle before it does
    pool_recycle=settings.tidb_pool_recycle,
    connect_args={"init_command": "SET time_zone = '+00:00'"},
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def init_db() -> None:
    """Create users, systems, planets and likes tables when missing."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(
        "Stellar tables ready on %s:%s/%s",
        settings.tidb_host,
        settings.tidb_port,
        settings.tidb_database,
    )


async def close_db() -> None:
    await engine.dispose()
    logger.info("TiDB pool closed")


async def get_db():
    """
    Request-scoped session. Commits when the endpoint returns, so a like
    is visible to the next ranking request; rolls back on any error.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
