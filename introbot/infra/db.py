"""Process-wide async engine and session factory for the preferences database."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

engine: Optional[AsyncEngine] = None
SessionLocal: Optional[async_sessionmaker[AsyncSession]] = None

# journal mode is stored in the database file, so one connection is enough
SQLITE_JOURNAL_PRAGMA = "PRAGMA journal_mode=WAL;"


def require_engine() -> AsyncEngine:
    if engine is None:
        raise RuntimeError("Engine not initialized")
    return engine


async def init_engine(dsn: str, echo: bool = False) -> None:
    global engine
    if engine is None:
        engine = create_async_engine(dsn, echo=echo)


def init_sessionmaker() -> None:
    global SessionLocal
    if SessionLocal is None:
        SessionLocal = async_sessionmaker(require_engine(), expire_on_commit=False)


async def set_sqlite_pragmas() -> None:
    eng = require_engine()
    # in-memory databases have no journal to switch
    if eng.url.get_backend_name() != "sqlite" or not eng.url.database:
        return
    async with eng.begin() as conn:
        await conn.exec_driver_sql(SQLITE_JOURNAL_PRAGMA)


async def dispose_engine() -> None:
    global engine, SessionLocal
    if engine is not None:
        await engine.dispose()
    engine = None
    SessionLocal = None
