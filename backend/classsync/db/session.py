import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ..storage_config import DATABASE_URL, POSTGRES_SCHEMA

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_session_maker: Optional[async_sessionmaker[AsyncSession]] = None
_postgres_ready = False


async def init_db_engine(database_url: str | None = None) -> bool:
    """Create the engine and probe it once. Returns False when unreachable."""
    global _engine, _session_maker, _postgres_ready
    if _engine is not None and _session_maker is not None:
        return True

    url = DATABASE_URL if database_url is None else database_url
    if not url:
        return False

    engine = create_async_engine(
        url,
        pool_pre_ping=True,
    )
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("Remote store unreachable: %s", exc)
        await engine.dispose()
        return False

    _engine = engine
    _session_maker = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    _postgres_ready = engine.dialect.name == "postgresql"
    return True


async def init_db_schema() -> None:
    if _engine is None:
        raise RuntimeError("Remote store engine is not initialized.")

    from .base import Base
    from . import models  # noqa: F401

    async with _engine.begin() as conn:
        if _engine.dialect.name == "postgresql":
            # crypt() backs server-side password verification
            await conn.execute(text("CREATE EXTENSION IF NOT EXISTS pgcrypto"))
            if POSTGRES_SCHEMA and POSTGRES_SCHEMA != "public":
                await conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{POSTGRES_SCHEMA}"'))
        await conn.run_sync(Base.metadata.create_all)


async def close_db_engine() -> None:
    global _engine, _session_maker, _postgres_ready
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_maker = None
    _postgres_ready = False


def is_postgres_ready() -> bool:
    return _postgres_ready and _session_maker is not None


def get_session_maker() -> Optional[async_sessionmaker[AsyncSession]]:
    return _session_maker

