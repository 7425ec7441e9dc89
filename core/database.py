"""
Database engine and session management with SQLAlchemy async
"""

from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
)
from sqlalchemy.pool import NullPool
from core.config import settings
import logging

logger = logging.getLogger(__name__)

_target_session_maker: Optional[async_sessionmaker] = None


def create_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for either the legacy source or the target store"""
    return create_async_engine(
        url,
        echo=echo,
        poolclass=NullPool,  # one connection per session, released on close
        future=True
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Session factory bound to the target engine"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


def get_target_session_maker() -> async_sessionmaker:
    """Lazily build the target session factory from settings (used by the API)"""
    global _target_session_maker
    if _target_session_maker is None:
        settings.require_databases("TARGET_DATABASE_URL")
        engine = create_engine(settings.TARGET_DATABASE_URL)
        _target_session_maker = create_session_factory(engine)
    return _target_session_maker


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get target database session"""
    async with get_target_session_maker()() as session:
        yield session
