"""
Database-handle provider.

One provider is built at startup and stored on ``app.state.db``; nothing is
kept in module globals. The provider connects once, hands out sessions from
the same engine afterwards, and forgets a failed engine so the next
``initialize()`` call tries again.

    provider = DatabaseProvider.from_settings(get_settings())
    await provider.initialize()
    async with provider.session() as session:
        ...
    await provider.shutdown()
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import Settings
from app.core.logging import get_logger

logger = get_logger(__name__)


class DatabaseProvider:
    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 10,
        max_overflow: int = 5,
        pool_timeout: int = 30,
        pool_recycle: int = 1800,
        echo: bool = False,
        **engine_kwargs,
    ):
        self.url = url
        self._engine_kwargs = {"echo": echo, "pool_pre_ping": True, **engine_kwargs}
        # SQLite (tests, local runs) uses a static or per-file pool with no sizing knobs
        if make_url(url).get_backend_name() != "sqlite":
            self._engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_recycle=pool_recycle,
            )
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatabaseProvider":
        return cls(
            settings.DATABASE_URL,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            echo=settings.DEBUG,
        )

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("DatabaseProvider is not initialized")
        return self._engine

    async def initialize(self) -> AsyncEngine:
        """Connect on first call; later and concurrent calls reuse the same engine."""
        if self._engine is not None:
            return self._engine

        async with self._lock:
            if self._engine is None:
                self._engine = await self._connect()
                self._session_factory = async_sessionmaker(
                    self._engine, class_=AsyncSession, expire_on_commit=False
                )
        return self._engine

    async def _connect(self) -> AsyncEngine:
        engine = create_async_engine(self.url, **self._engine_kwargs)
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            await engine.dispose()
            logger.error("database_connection_failed", error=str(e))
            raise

        logger.info("database_connected", url=engine.url.render_as_string(hide_password=True))
        return engine

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self._session_factory is None:
            raise RuntimeError("DatabaseProvider is not initialized")
        async with self._session_factory() as session:
            yield session

    async def shutdown(self) -> None:
        async with self._lock:
            if self._engine is not None:
                await self._engine.dispose()
                logger.info("database_disconnected")
            self._engine = None
            self._session_factory = None


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session from the provider owned by the application."""
    provider: DatabaseProvider = request.app.state.db
    async with provider.session() as session:
        yield session
