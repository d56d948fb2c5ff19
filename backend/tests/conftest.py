from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from servicehub.db import build_engine, create_tables, get_session
from servicehub.main import app
from servicehub.services.employee import InMemoryEmployeeService, set_employee_service
from servicehub.services.workflow import DEFAULT_POST_COMMIT_HOOKS, set_post_commit_hooks

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Create a fresh in-memory database per test.

    Workflow calls commit more than once (primary write, then each
    post-commit hook), so tests run against real commits on a throwaway
    database instead of an outer rolled-back transaction.
    """
    _engine = build_engine(TEST_DATABASE_URL)
    await create_tables(_engine)
    yield _engine
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Yield a database session bound to the per-test engine."""
    session = AsyncSession(bind=engine, expire_on_commit=False)
    yield session
    await session.close()


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def directory() -> Iterator[InMemoryEmployeeService]:
    """Install an empty in-memory directory for the test and restore a clean one after."""
    svc = InMemoryEmployeeService()
    set_employee_service(svc)
    yield svc
    set_employee_service(InMemoryEmployeeService())


@pytest.fixture(autouse=True)
def _reset_post_commit_hooks() -> Iterator[None]:
    yield
    set_post_commit_hooks(DEFAULT_POST_COMMIT_HOOKS)
