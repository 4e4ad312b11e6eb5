from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from mediatrack.config import DATABASE_URL, SQL_ECHO

Base = declarative_base()


def normalize_database_url(url: str) -> str:
    # Plain postgres URLs from hosting providers need the async driver
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


def build_engine(url: Optional[str] = None, **kwargs) -> AsyncEngine:
    kwargs.setdefault("echo", SQL_ECHO)
    return create_async_engine(normalize_database_url(url or DATABASE_URL), **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_models(engine: AsyncEngine) -> None:
    """Create the tables and seed the admin bootstrap sentinel row."""
    # Imported here so every model is registered on Base.metadata
    from mediatrack.models import comment_model, library_model, media_model  # noqa: F401
    from mediatrack.models.user_model import AdminBootstrap

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = build_session_factory(engine)
    async with factory() as session:
        existing = await session.scalar(
            select(AdminBootstrap).where(AdminBootstrap.id == AdminBootstrap.SENTINEL_ID)
        )
        if existing is None:
            session.add(AdminBootstrap(id=AdminBootstrap.SENTINEL_ID, admin_user_id=None))
            await session.commit()


# Dependency for FastAPI routes; the factory is injected by create_app
async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with request.app.state.session_factory() as session:
        yield session
