from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from hr_leaves.db import get_session
from hr_leaves.main import app
from hr_leaves.models import SQLModel
from hr_leaves.services.employee import InMemoryEmployeeDirectory, set_employee_directory

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Create a throwaway SQLite database with all tables for one test.

    Row locks are not enforced by SQLite; the locking paths still run, they
    simply do not block.
    """
    _engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'hr_leaves.db'}", poolclass=NullPool)
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Yield a session on the test database for service-level tests and assertions."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncClient]:
    """Async HTTP client whose requests each get their own session on the test database."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def directory() -> Iterator[InMemoryEmployeeDirectory]:
    """Install an empty in-memory Employee Directory for the test."""
    stub = InMemoryEmployeeDirectory()
    set_employee_directory(stub)
    yield stub
    set_employee_directory(InMemoryEmployeeDirectory())
