"""Database engine, session factory and the get_db dependency.

Learn: one AsyncEngine per process, built from MAITRE_DATABASE_URL.
Postgres (asyncpg) gets a sized connection pool. An in-memory SQLite URL
gets a StaticPool instead: every checkout must reuse the one connection,
otherwise each session would see its own empty database. Tests build
their private engines through the same build_engine().
"""

from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from maitre.config import settings


def _is_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (url.endswith("://") or ":memory:" in url)


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    if _is_memory_sqlite(url):
        return create_async_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=echo)
    return create_async_engine(url, echo=echo, pool_size=5, max_overflow=15)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Rows stay readable after commit; handlers serialize them afterwards.
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.database_url, echo=settings.debug)
async_session_factory = build_session_factory(engine)


async def get_db() -> AsyncIterator[AsyncSession]:
    """One session per request, closed when the response is done."""
    async with async_session_factory() as session:
        yield session
