"""
Database engine, session factory, and declarative base for NeoWatch.

Uses async SQLAlchemy 2.0 (aiosqlite in development, asyncpg in production).
The engine is built from explicit Settings and owned by whoever built it:
the scheduler process and the operator scripts each create one at startup
and dispose it with close_db() on the way out.
"""

import structlog
from sqlalchemy import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from neowatch.config import Settings

logger = structlog.get_logger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for NeoWatch models."""

    pass


def build_engine(cfg: Settings) -> AsyncEngine:
    """Create the async engine for cfg.DATABASE_URL.

    Pool sizing only applies to server databases; SQLite keeps
    SQLAlchemy's default pool for its dialect.
    """
    url = make_url(cfg.async_database_url)
    kwargs: dict = {"echo": cfg.debug}
    if url.get_backend_name() != "sqlite":
        kwargs.update(
            pool_size=cfg.db_pool_size,
            max_overflow=cfg.db_max_overflow,
            pool_recycle=cfg.db_pool_recycle,
            pool_pre_ping=True,
        )
    engine = create_async_engine(url, **kwargs)
    logger.info("database_engine_created", db=url.render_as_string(hide_password=True))
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Stores read attributes after commit
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create any missing tables from the ORM models."""
    # Import all models so Base.metadata is populated
    import neowatch.db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_initialized", tables=sorted(Base.metadata.tables))


async def close_db(engine: AsyncEngine) -> None:
    await engine.dispose()
    logger.info("database_closed")
