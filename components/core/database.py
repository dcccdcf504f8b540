"""Core classes and mixins for DB connections"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional, cast
from typing import Callable, AsyncContextManager

from sqlalchemy import Column, Enum
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from components.core import config

settings = config.get_settings()
Base = declarative_base()
SessionMaker = Callable[[], AsyncContextManager[AsyncSession]]


def utcnow() -> datetime:
    """Naive UTC timestamp used for column defaults."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def enum_column(enum_cls, **kwargs) -> Column:
    """String-backed enum column storing member values."""
    return Column(
        Enum(enum_cls, values_callable=lambda e: [m.value for m in e], native_enum=False, length=20),
        **kwargs,
    )


class DatabaseManager:
    def __init__(self, engine: Optional[AsyncEngine] = None) -> None:
        """Initialize DatabaseManager with optional engine for testing."""
        self.engine = engine or self._create_engine()

    def _create_engine(self) -> AsyncEngine:
        """Create async engine for the configured database."""
        url = settings.async_db_url
        if url.startswith("sqlite"):
            return create_async_engine(url, echo=settings.DB_ECHO)
        return create_async_engine(
            url,
            echo=settings.DB_ECHO,
            pool_pre_ping=True,  # Enable connection health checks
            pool_size=5,
            max_overflow=10,
        )

    def get_session(self) -> SessionMaker:
        """Returns SessionMaker for database sessions."""
        if not self.engine:
            raise ValueError("Database engine wasn't initialized")

        return cast(
            SessionMaker,
            sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autocommit=False,
                autoflush=False,
            ),
        )

    @asynccontextmanager
    async def get_db(self) -> AsyncContextManager[AsyncSession]:
        """Get database session context manager."""
        async_session = self.get_session()
        async with async_session() as session:
            try:
                yield session
            finally:
                await session.close()

    async def create_all(self) -> None:
        """Create all registered tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
