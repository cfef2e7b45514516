"""
Database connection and session management.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from dating_service.domain.exceptions import (
    DatabaseCloseError,
    DatabaseConnectionError,
)
from dating_service.infrastructure.monitoring import get_logger

if TYPE_CHECKING:
    from dating_service.config.settings import Settings

logger = get_logger(__name__)


class Database:
    """
    Async database connection manager using SQLAlchemy.

    Provides session factory and connection pooling. connect() fails fast:
    the first connection is opened and checked before it returns, so an
    unreachable server is reported at startup instead of on first request.
    """

    def __init__(
        self,
        database_url: str,
        echo: bool = False,
        pool_size: int = 20,
        max_overflow: int = 10,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        connect_timeout: float = 10.0,
        application_name: str = "dating-service",
    ):
        """
        Initialize database connection.

        Args:
            database_url: SQLAlchemy async connection string
            echo: Enable SQL query logging
            pool_size: Number of connections to maintain in pool
            max_overflow: Max connections beyond pool_size
            pool_timeout: Seconds to wait for connection from pool
            pool_recycle: Recycle connections after N seconds
            connect_timeout: Seconds allowed for the initial connection check
            application_name: Name reported to PostgreSQL
        """
        self.database_url = database_url
        self.echo = echo
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_timeout = pool_timeout
        self.pool_recycle = pool_recycle
        self.connect_timeout = connect_timeout
        self.application_name = application_name
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker | None = None

    @classmethod
    def from_settings(cls, settings: "Settings") -> "Database":
        """
        Build a Database from application settings.

        Args:
            settings: Application settings

        Returns:
            Unconnected Database instance
        """
        return cls(
            database_url=settings.database_url,
            echo=settings.DATABASE_ECHO,
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            pool_timeout=settings.DATABASE_POOL_TIMEOUT,
            pool_recycle=settings.DATABASE_POOL_RECYCLE,
            connect_timeout=settings.DATABASE_CONNECT_TIMEOUT,
        )

    @property
    def safe_url(self) -> str:
        """Database URL with the password masked, for logs and errors."""
        return make_url(self.database_url).render_as_string(hide_password=True)

    @property
    def is_connected(self) -> bool:
        """True between a successful connect() and disconnect()."""
        return self._engine is not None

    def _connect_args(self) -> dict:
        if make_url(self.database_url).get_driver_name() != "asyncpg":
            return {}
        return {
            "timeout": self.connect_timeout,
            "server_settings": {
                "application_name": self.application_name,
            },
        }

    async def connect(self) -> None:
        """
        Establish database connection and create session factory.

        Raises:
            DatabaseConnectionError: If the database cannot be reached
        """
        if self._engine is not None:
            return

        engine = create_async_engine(
            self.database_url,
            echo=self.echo,
            pool_size=self.pool_size,
            max_overflow=self.max_overflow,
            pool_timeout=self.pool_timeout,
            pool_recycle=self.pool_recycle,
            pool_pre_ping=True,
            connect_args=self._connect_args(),
        )

        try:
            await asyncio.wait_for(
                self._ping(engine), timeout=self.connect_timeout
            )
        except asyncio.TimeoutError as e:
            await engine.dispose()
            raise DatabaseConnectionError(
                self.safe_url,
                f"no response within {self.connect_timeout}s",
            ) from e
        except Exception as e:
            await engine.dispose()
            raise DatabaseConnectionError(
                self.safe_url, str(e) or type(e).__name__
            ) from e

        self._engine = engine
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info(f"Database connected: {self.safe_url}")

    @staticmethod
    async def _ping(engine: AsyncEngine) -> None:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def disconnect(self) -> None:
        """
        Close database connection and cleanup resources.

        Raises:
            DatabaseCloseError: If the connection pool fails to close
        """
        if self._engine is None:
            return

        engine = self._engine
        self._engine = None
        self._session_factory = None

        try:
            await engine.dispose()
        except Exception as e:
            raise DatabaseCloseError(str(e) or type(e).__name__) from e

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide async database session context manager.

        Automatically commits on success, rolls back on exception.

        Usage:
            async with database.session() as session:
                result = await session.execute(query)

        Yields:
            AsyncSession: Database session with transaction management
        """
        if self._session_factory is None:
            raise RuntimeError("Database not connected. Call connect() first.")

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def health_check(self) -> bool:
        """
        Check database connectivity.

        Returns:
            True if connection is healthy, False otherwise
        """
        if self._engine is None:
            return False

        try:
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.warning("Database health check failed", exc_info=True)
            return False
