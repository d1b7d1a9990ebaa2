import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from swipetrade.infrastructure.database.models import Base

logger = logging.getLogger(__name__)


class PostgresClient:
    """
    Owns the async engine for the record store.

    Sessions never autocommit: repositories commit their own writes so a
    compare-and-swap update and its follow-up insert land together.
    """

    def __init__(
        self,
        db_url: str,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        echo: bool = False,
        command_timeout: Optional[float] = None,
    ):
        connect_args = {"command_timeout": command_timeout} if command_timeout else {}

        self._engine: AsyncEngine = create_async_engine(
            db_url.replace("postgresql://", "postgresql+asyncpg://", 1),
            echo=echo,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
            pool_recycle=pool_recycle,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        self._sessions = async_sessionmaker(self._engine, expire_on_commit=False)
        self._ready = False

    @property
    def is_ready(self) -> bool:
        return self._ready

    async def init(self, create_schema: bool = True) -> None:
        """
        Check connectivity and, unless disabled, create the users, portfolios,
        watchlists and activities tables. Safe to call more than once.
        """
        if self._ready:
            return

        logger.info("🔌 Connecting to PostgreSQL...")
        async with self._engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if create_schema:
                await conn.run_sync(Base.metadata.create_all)
                logger.info(f"🧱 Schema ready: {', '.join(sorted(Base.metadata.tables))}")

        self._ready = True
        logger.info("✅ Record store database ready")

    async def close(self) -> None:
        if not self._ready:
            return
        await self._engine.dispose()
        self._ready = False
        logger.info("🔌 PostgreSQL pool disposed")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self._sessions() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def health_check(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"❌ Record store unreachable: {e}")
            return False
        return True
