from collections.abc import AsyncIterator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.platform.config import Settings
from app.platform.db.base import Base
from app.platform.logger import get_logger

logger = get_logger(__name__)


class Database:
    """
    Owns the async engine and session factory for the lifetime of the process.

    Built once at application startup, kept on ``app.state.db`` and handed to
    request handlers through :func:`get_db`. ``dispose()`` releases the pool
    at shutdown.
    """

    def __init__(self, url: str, echo: bool = False):
        engine_kwargs = {"echo": echo, "pool_pre_ping": True}
        if not url.startswith("sqlite"):
            engine_kwargs.update(
                pool_recycle=1800,
                pool_size=20,
                max_overflow=30,  # (burst capacity)
                pool_timeout=30,
            )
        self.url = url
        self.engine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine, expire_on_commit=False, autoflush=False, autocommit=False
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.DATABASE_URL, echo=settings.DB_ECHO)

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def ping(self) -> bool:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")


def get_database(request: Request) -> Database:
    return request.app.state.db


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    async with get_database(request).session_factory() as session:
        yield session
