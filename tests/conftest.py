from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable, Iterator
from pathlib import Path

import httpx
import pytest
from alembic import command
from alembic.config import Config

from notes_backend.config import settings
from notes_backend.db import dispose_engine, dispose_engine_cache, reset_engine_cache, session_scope
from notes_backend.models import User

MakeUser = Callable[..., Awaitable[int]]

_OVERRIDDEN = (
    "database_url",
    "attachments_local_dir",
    "share_token_secret",
    "public_base_url",
    "reminder_scheduler_enabled",
    "notification_backend",
    "notification_timeout_seconds",
    "version_retention_limit",
    "note_write_max_attempts",
    "attachments_max_size_bytes",
    "share_link_max_ttl_hours",
    "max_grants_per_note",
    "reminder_sweep_interval_seconds",
    "s3_bucket",
    "storage_timeout_seconds",
)


def _alembic_upgrade_head() -> None:
    cfg = Config("alembic.ini")
    command.upgrade(cfg, "head")


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
async def _dispose_engine_per_test(  # pyright: ignore[reportUnusedFunction]
    anyio_backend: object,  # noqa: ARG001
) -> AsyncGenerator[None, None]:
    # Dispose the cached AsyncEngine (aiosqlite worker thread) while the
    # per-test event loop is still alive.
    _ = anyio_backend
    yield
    await dispose_engine()


def pytest_sessionfinish(session: object, exitstatus: int) -> None:  # noqa: ARG001
    # Safety net: close cached engine so CI can exit cleanly.
    _ = session, exitstatus
    dispose_engine_cache()


@pytest.fixture
def app_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Fresh migrated SQLite database and local attachment dir for one test."""
    saved = {name: getattr(settings, name) for name in _OVERRIDDEN}
    database_url = f"sqlite:///{tmp_path / 'test.db'}"
    # alembic/env.py prefers DATABASE_URL over settings.
    monkeypatch.setenv("DATABASE_URL", database_url)
    try:
        settings.database_url = database_url
        settings.attachments_local_dir = str(tmp_path / "attachments")
        settings.share_token_secret = "test-secret"
        settings.public_base_url = "http://test"
        settings.reminder_scheduler_enabled = False
        settings.notification_backend = "inapp"
        settings.s3_bucket = ""
        reset_engine_cache()
        _alembic_upgrade_head()
        yield tmp_path
    finally:
        for name, value in saved.items():
            setattr(settings, name, value)
        reset_engine_cache()


@pytest.fixture
def make_user(app_env: Path) -> MakeUser:
    _ = app_env

    async def _make(
        email: str,
        *,
        token: str | None = None,
        name: str = "",
        is_active: bool = True,
    ) -> int:
        async with session_scope() as session:
            user = User(
                email=email,
                email_lower=email.lower(),
                name=name or email.split("@", 1)[0],
                api_token=token,
                is_active=is_active,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            assert user.id is not None
            return int(user.id)

    return _make


@pytest.fixture
async def client(app_env: Path) -> AsyncGenerator[httpx.AsyncClient, None]:
    from notes_backend.main import app  # pyright: ignore[reportMissingTypeStubs]

    _ = app_env
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
