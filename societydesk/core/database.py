"""Async engine, per-request sessions, and schema bootstrap."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from societydesk.core.config import get_settings

settings = get_settings()


def engine_options(database_url: str) -> dict[str, Any]:
    """Keyword arguments for ``create_async_engine`` suited to the backend."""
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"echo": False}
    return {
        "echo": False,
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_pre_ping": True,
    }


engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))

async_session_factory = sessionmaker(
    engine,
    class_=AsyncSession,
    # Services read ids off committed objects, sometimes after a rollback
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request, closed afterwards."""
    async with async_session_factory() as session:
        yield session


async def init_db() -> None:
    """Create any missing tables. Deployed databases are migrated with Alembic."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
