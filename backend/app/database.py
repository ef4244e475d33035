"""Async SQLAlchemy engine and session factory.

Usage in routes:
    from app.database import get_db

    @router.get("/files")
    async def list_files(db: AsyncSession = Depends(get_db)):
        result = await db.execute(select(FileRecord))
        return result.scalars().all()

The engine is built once at import time; everything downstream receives a
session through ``get_db`` so tests can swap it via ``dependency_overrides``.
"""
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from app.config import settings


def build_engine(url: str, **engine_kwargs) -> AsyncEngine:
    """Create an async engine. Pool sizing only applies to server databases."""
    if not url.startswith("sqlite"):
        engine_kwargs.setdefault("pool_size", 10)
        engine_kwargs.setdefault("max_overflow", 20)
        engine_kwargs.setdefault("pool_pre_ping", True)
    return create_async_engine(url, echo=False, **engine_kwargs)


engine = build_engine(settings.DATABASE_URL)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db():
    """FastAPI dependency that yields an async DB session."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()
