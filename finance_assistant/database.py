import logging

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from finance_assistant.models.orm import Base

logger = logging.getLogger(__name__)


def create_engine_for(url: str):
    """Async engine for ``url``; sqlite files get one connection per checkout."""
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=False, poolclass=NullPool)
    return create_async_engine(url, echo=False, pool_pre_ping=True)


def create_session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_models(engine):
    """Create any missing tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def verify_database(session_factory):
    """Verify database connection on startup"""
    async with session_factory() as session:
        await session.execute(select(1))
    logger.info("✅ Database connected")


# Database dependency
async def get_db(request: Request):
    async with request.app.state.session_factory() as session:
        try:
            yield session
        except SQLAlchemyError as e:
            logger.error(f"❌ Database session error: {e}")
            await session.rollback()
            raise
