"""Database connection management for PropLens"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker

from .models import Base

logger = structlog.get_logger(__name__)


class DatabaseManager:
    """Manages the async engine and session factory"""

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.echo = echo
        self.engine: Optional[AsyncEngine] = None
        self.async_session_maker: Optional[async_sessionmaker] = None

    async def initialize(self) -> None:
        """Initialize database connections"""
        try:
            self.engine = create_async_engine(
                self.database_url,
                echo=self.echo,
                pool_pre_ping=not self.database_url.startswith("sqlite"),
            )

            self.async_session_maker = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False
            )

            logger.info("database_initialized", dialect=self.engine.dialect.name)

        except Exception as e:
            logger.error("database_initialization_failed", error=str(e))
            raise

    async def create_tables(self) -> None:
        """Create all tables (development and tests; production uses migrations)"""
        if not self.engine:
            raise RuntimeError("Database not initialized")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_tables_created", tables=sorted(Base.metadata.tables))

    async def close(self) -> None:
        """Close all database connections"""
        try:
            if self.engine:
                await self.engine.dispose()
                logger.info("database_engine_disposed")
        except Exception as e:
            logger.error("database_close_failed", error=str(e))

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get SQLAlchemy async session"""
        if not self.async_session_maker:
            raise RuntimeError("Database not initialized")

        async with self.async_session_maker() as session:
            try:
                yield session
            except Exception as e:
                await session.rollback()
                logger.error("database_session_error", error=str(e))
                raise

    async def health_check(self) -> dict:
        """Check health of the database connection"""
        health_status = {"database": False}
        try:
            async with self.get_session() as session:
                result = await session.execute(text("SELECT 1"))
                health_status["database"] = result.scalar() == 1
        except Exception as e:
            logger.error("database_health_check_failed", error=str(e))
        return health_status
