from __future__ import annotations

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.config import settings
from notes_backend.db_urls import (
    ensure_sqlite_parent_dir,
    is_sqlite_url,
    normalize_database_url_for_async,
)


def _create_async_engine(database_url: str) -> AsyncEngine:
    url = normalize_database_url_for_async(database_url)
    timeout = float(settings.database_timeout_seconds)
    if is_sqlite_url(url):
        ensure_sqlite_parent_dir(database_url)
        # sqlite3 `timeout` bounds how long a writer waits for the database lock.
        return create_async_engine(url, echo=False, connect_args={"timeout": timeout})
    return create_async_engine(url, echo=False, pool_pre_ping=True, pool_timeout=timeout)


@lru_cache(maxsize=4)
def get_engine() -> AsyncEngine:
    # Tests override settings.database_url and then call reset_engine_cache().
    return _create_async_engine(settings.database_url)


def reset_engine_cache() -> None:
    get_engine.cache_clear()


async def dispose_engine() -> None:
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
    get_engine.cache_clear()


def dispose_engine_cache() -> None:
    # Sync fallback for process exit: drop pooled connections without awaiting them.
    if get_engine.cache_info().currsize:
        get_engine().sync_engine.dispose(close=False)
    get_engine.cache_clear()


def _session_maker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    async with _session_maker()() as session:
        yield session


async def get_session() -> AsyncIterator[AsyncSession]:
    async with _session_maker()() as session:
        yield session
