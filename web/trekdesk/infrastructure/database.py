from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from trekdesk.core import get_settings


settings = get_settings()


def _engine_options() -> dict:
    options = {"echo": settings.DB_ECHO, "pool_pre_ping": True}
    # SQLite (local runs, tests) has no connection pool to size
    if not settings.is_sqlite:
        options["pool_size"] = settings.DB_POOL_SIZE
    return options


engine = create_async_engine(settings.DB_DSN, **_engine_options())

AsyncSessionFactory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session"""
    async with AsyncSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
